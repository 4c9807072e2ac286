"""Pytest configuration and shared fixtures."""

from unittest.mock import AsyncMock, Mock

import pytest

from csvbridge.config import Settings
from csvbridge.mapping import TargetField
from csvbridge.remote import ImportExecutor, ImportResult, StaticSchemaSource
from csvbridge.wizard import ImportTarget, ImportWizard


@pytest.fixture
def mock_settings() -> Settings:
    """Create settings with test values."""
    return Settings(
        import_service_url="http://import.test/api",
        import_service_token="test-token",
        import_service_timeout=5.0,
        max_file_size=10485760,
        default_max_records=None,
        host="127.0.0.1",
        port=8000,
        debug=False,
        cors_allow_origins=["*"],
    )


@pytest.fixture
def target_fields() -> list[TargetField]:
    """Target fields in precedence order."""
    return [
        TargetField(api_name="First_Name__c", label="First Name"),
        TargetField(api_name="Last_Name__c", label="Last Name"),
        TargetField(api_name="Email__c", label="Email"),
        TargetField(api_name="Student_Id__c", label="Student ID"),
    ]


@pytest.fixture
def alias_table() -> dict[str, list[str]]:
    """Known header aliases per field."""
    return {
        "First_Name__c": ["Given Name", "First"],
        "Email__c": ["E-mail Address", "Email"],
    }


@pytest.fixture
def sample_csv() -> str:
    """A small roster export."""
    return (
        "Given Name,Last Name,e-mail address,Student Id\n"
        "Ada,Lovelace,ada@example.com,1001\n"
        "\n"
        'Charles,"Babbage, Jr.",charles@example.com,1002\n'
    )


@pytest.fixture
def schema_source(target_fields, alias_table) -> StaticSchemaSource:
    """In-memory schema source."""
    return StaticSchemaSource(
        fields=target_fields,
        default_mapping={"Email__c": "Email"},
        alias_table=alias_table,
    )


@pytest.fixture
def mock_executor() -> Mock:
    """Create a mocked import executor that succeeds."""
    executor = Mock(spec=ImportExecutor)
    executor.execute = AsyncMock(
        return_value=ImportResult(success=True, records_created=2, errors=[])
    )
    return executor


@pytest.fixture
def import_target() -> ImportTarget:
    """Import target with no record limit."""
    return ImportTarget(
        parent_record_id="a01000000000001",
        parent_field_reference="Course__c",
        object_to_create="Enrollment__c",
        mapping_metadata_object="Enrollment_Mapping__mdt",
        max_records=None,
    )


@pytest.fixture
def wizard(import_target, schema_source, mock_executor) -> ImportWizard:
    """A fresh wizard on the upload step."""
    return ImportWizard(
        target=import_target,
        schema_source=schema_source,
        executor=mock_executor,
    )
