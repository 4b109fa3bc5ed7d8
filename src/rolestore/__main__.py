"""Entry point for 'python -m rolestore' command.

This module allows the RoleStore CLI to be invoked using
'python -m rolestore'.
"""

from rolestore.cli import main

if __name__ == "__main__":
    main()
