import pytest

from dir_access.rights import FileSystemRights, GenericRights, covers, is_generic, normalize_rights, parse_rights


def test_normalize_rights_passes_elementary_masks_through() -> None:
    mask = int(FileSystemRights.READ_DATA | FileSystemRights.WRITE_ATTRIBUTES)

    assert normalize_rights(mask) == mask
    assert normalize_rights(int(FileSystemRights.MODIFY)) == FileSystemRights.MODIFY


def test_normalize_rights_expands_generic_read() -> None:
    expected = (
        FileSystemRights.READ_ATTRIBUTES
        | FileSystemRights.READ_DATA
        | FileSystemRights.READ_EXTENDED_ATTRIBUTES
        | FileSystemRights.READ_PERMISSIONS
        | FileSystemRights.SYNCHRONIZE
    )

    assert normalize_rights(int(GenericRights.READ)) == expected


def test_normalize_rights_expands_generic_execute() -> None:
    expected = (
        FileSystemRights.EXECUTE_FILE
        | FileSystemRights.READ_PERMISSIONS
        | FileSystemRights.READ_ATTRIBUTES
        | FileSystemRights.SYNCHRONIZE
    )

    assert normalize_rights(int(GenericRights.EXECUTE)) == expected


def test_normalize_rights_unions_multiple_generic_bits() -> None:
    mapped = normalize_rights(int(GenericRights.READ | GenericRights.WRITE))

    assert covers(mapped, FileSystemRights.READ_DATA | FileSystemRights.WRITE_DATA | FileSystemRights.APPEND_DATA)
    assert not mapped & FileSystemRights.EXECUTE_FILE
    assert not is_generic(mapped)


def test_normalize_rights_all_maps_to_full_control() -> None:
    assert normalize_rights(int(GenericRights.ALL)) == FileSystemRights.FULL_CONTROL


def test_normalize_rights_is_idempotent() -> None:
    for mask in (GenericRights.READ, GenericRights.WRITE | GenericRights.EXECUTE, GenericRights.ALL):
        once = normalize_rights(int(mask))
        assert normalize_rights(once) == once


def test_modify_includes_list_directory_and_delete() -> None:
    assert covers(FileSystemRights.MODIFY, FileSystemRights.LIST_DIRECTORY)
    assert covers(FileSystemRights.MODIFY, FileSystemRights.DELETE)
    assert not covers(FileSystemRights.MODIFY, FileSystemRights.CHANGE_PERMISSIONS)
    assert covers(FileSystemRights.FULL_CONTROL, FileSystemRights.MODIFY)


def test_parse_rights_accepts_names() -> None:
    assert parse_rights("list-directory") == FileSystemRights.LIST_DIRECTORY
    assert parse_rights("Modify") == FileSystemRights.MODIFY
    with pytest.raises(ValueError):
        parse_rights("fly")
