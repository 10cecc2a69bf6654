"""Test model enums and conversions."""


from flipperble.models.enums import (
    STATUS_DESCRIPTIONS,
    CommandStatus,
    FileType,
    describe_status,
    file_type_from_value,
    status_from_value,
)


class TestCommandStatus:
    """Test CommandStatus enum."""

    def test_common_values(self):
        """Test common status codes."""
        assert CommandStatus.OK == 0
        assert CommandStatus.ERROR == 1
        assert CommandStatus.ERROR_DECODE == 2
        assert CommandStatus.ERROR_NOT_IMPLEMENTED == 3
        assert CommandStatus.ERROR_BUSY == 4
        assert CommandStatus.ERROR_CONTINUOUS_COMMAND_INTERRUPTED == 14
        assert CommandStatus.ERROR_INVALID_PARAMETERS == 15

    def test_storage_values(self):
        """Test storage status codes."""
        assert CommandStatus.ERROR_STORAGE_NOT_READY == 5
        assert CommandStatus.ERROR_STORAGE_EXIST == 6
        assert CommandStatus.ERROR_STORAGE_NOT_EXIST == 7
        assert CommandStatus.ERROR_STORAGE_INVALID_PARAMETER == 8
        assert CommandStatus.ERROR_STORAGE_DENIED == 9
        assert CommandStatus.ERROR_STORAGE_INVALID_NAME == 10
        assert CommandStatus.ERROR_STORAGE_INTERNAL == 11
        assert CommandStatus.ERROR_STORAGE_NOT_IMPLEMENTED == 12
        assert CommandStatus.ERROR_STORAGE_ALREADY_OPEN == 13
        assert CommandStatus.ERROR_STORAGE_DIR_NOT_EMPTY == 18

    def test_app_values(self):
        """Test application status codes."""
        assert CommandStatus.ERROR_APP_CANT_START == 16
        assert CommandStatus.ERROR_APP_SYSTEM_LOCKED == 17

    def test_every_status_described(self):
        """Test every status has a description."""
        assert set(STATUS_DESCRIPTIONS) == set(CommandStatus)


class TestFileType:
    """Test FileType enum."""

    def test_file_type_values(self):
        """Test file types have correct values."""
        assert FileType.FILE == 0
        assert FileType.DIR == 1


class TestConversions:
    """Test raw value conversions."""

    def test_status_from_value(self):
        """Test known codes become enum members."""
        assert status_from_value(7) is CommandStatus.ERROR_STORAGE_NOT_EXIST

    def test_status_from_unknown_value(self):
        """Test unknown codes stay plain ints."""
        status = status_from_value(250)
        assert status == 250
        assert not isinstance(status, CommandStatus)

    def test_file_type_from_value(self):
        """Test file type conversion."""
        assert file_type_from_value(1) is FileType.DIR
        assert file_type_from_value(5) == 5

    def test_describe_status(self):
        """Test descriptions for known and unknown codes."""
        assert describe_status(CommandStatus.ERROR_STORAGE_NOT_EXIST) == (
            "file or directory does not exist"
        )
        assert describe_status(17) == "application system locked"
        assert describe_status(250) == "unknown status 250"
