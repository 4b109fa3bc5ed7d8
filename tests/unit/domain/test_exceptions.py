"""Unit tests for role store error messages."""

from rolestore.domain.exceptions import (
    DuplicateNameError,
    NotFoundError,
    ReferencedInPolicyError,
    ReferencedInZoneError,
    RoleStoreError,
    UnknownPrincipalError,
    VersionBumpFailedError,
)


def test_duplicate_name_message():
    error = DuplicateNameError("etl-writers")
    assert error.role_name == "etl-writers"
    assert str(error) == "role with name: etl-writers already exists"


def test_rename_message_without_names():
    error = ReferencedInPolicyError("etl-writers", "rename")
    assert error.message == (
        "Rolename for 'etl-writers' can not be updated as it is referenced "
        "in one or more policies"
    )


def test_delete_message_lists_referencing_objects():
    error = ReferencedInZoneError("etl-writers", "delete", ["finance", "hr"])
    assert error.message == (
        "Role 'etl-writers' can not be deleted as it is referenced "
        "in one or more security zones: finance, hr"
    )


def test_unknown_principal_message():
    error = UnknownPrincipalError("GROUP", "etl-team")
    assert error.message == "group with name: etl-team does not exist"


def test_all_errors_are_role_store_errors():
    for error in (
        DuplicateNameError("r"),
        NotFoundError("missing"),
        UnknownPrincipalError("USER", "u"),
        VersionBumpFailedError("failed"),
    ):
        assert isinstance(error, RoleStoreError)
