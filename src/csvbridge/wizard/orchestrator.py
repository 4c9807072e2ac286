"""Import wizard: upload -> mapping -> processing -> summary."""

import asyncio
import logging
import time
import uuid
from typing import Iterable, Optional

from ..config import settings
from ..mapping import (
    AliasTable,
    AutoMatcher,
    ConfigUnavailableError,
    ExecutionFailedError,
    HeaderNotFoundError,
    InputRejectedError,
    MappingDisplayRow,
    MappingEdit,
    MappingStore,
    MappingValidator,
    MatchResult,
    NothingMappedError,
)
from ..parsing import CsvTokenizer
from ..remote import (
    ImportExecutor,
    ImportRequest,
    ImportResult,
    SchemaSource,
    get_error_message,
)
from .models import (
    ImportTarget,
    Notification,
    NotificationVariant,
    SessionState,
    WizardSnapshot,
    WizardStep,
)

logger = logging.getLogger(__name__)

CSV_CONTENT_TYPE = "text/csv"
CSV_EXTENSION = ".csv"


class ImportWizard:
    """
    Drives one import session.

    The wizard owns the session state and the mapping store, and calls out
    to the schema source and executor. User-facing failures never raise out
    of the public step methods; they are queued as notifications instead.
    """

    def __init__(
        self,
        target: ImportTarget,
        schema_source: SchemaSource,
        executor: ImportExecutor,
        matcher: Optional[AutoMatcher] = None,
        validator: Optional[MappingValidator] = None,
        max_file_size: Optional[int] = None,
    ):
        """
        Initialize the wizard.

        Args:
            target: Parent record, object and record limit for this import
            schema_source: Source of target fields, default mapping and aliases
            executor: Service that creates records from the upload
            matcher: Auto-matcher (created if not provided)
            validator: Mapping validator (created if not provided)
            max_file_size: Upload size limit in bytes (defaults to settings)
        """
        self.session_id = str(uuid.uuid4())
        self.target = target
        self.schema_source = schema_source
        self.executor = executor
        self.matcher = matcher or AutoMatcher()
        self.validator = validator or MappingValidator()
        self.max_file_size = max_file_size or settings.max_file_size

        max_records = target.max_records
        if max_records is None:
            max_records = settings.default_max_records
        self.tokenizer = CsvTokenizer(max_records=max_records)

        self.state = SessionState()
        self.store = MappingStore()
        self._notifications: list[Notification] = []
        self._in_flight: dict[str, asyncio.Future] = {}
        self.last_active = time.monotonic()

    # Notifications

    def notify(self, title: str, message: str, variant: NotificationVariant):
        """Queue a user-facing notification."""
        self._notifications.append(Notification(title=title, message=message, variant=variant))

    def _success(self, message: str):
        self.notify("Success", message, NotificationVariant.SUCCESS)

    def _warning(self, message: str):
        self.notify("Warning", message, NotificationVariant.WARNING)

    def _error(self, message: str):
        self.notify("Error", message, NotificationVariant.ERROR)

    @property
    def notifications(self) -> list[Notification]:
        return list(self._notifications)

    def drain_notifications(self) -> list[Notification]:
        """Return and forget all queued notifications."""
        drained, self._notifications = self._notifications, []
        return drained

    @property
    def is_busy(self) -> bool:
        """True while an import call or a discovery-backed transition is outstanding."""
        return self.state.is_processing or self.state.is_loading

    def _guard_busy(self) -> bool:
        """Return True (and warn) when another step is still awaiting a remote call."""
        if self.state.is_processing:
            logger.warning(f"Session {self.session_id}: import already in progress")
            self._warning("An import is already in progress. Please wait for it to finish.")
            return True
        if self.state.is_loading:
            logger.warning(f"Session {self.session_id}: field configuration still loading")
            self._warning("Field configuration is still loading. Please wait.")
            return True
        return False

    async def _shared(self, key: str, factory):
        """
        Run ``factory()`` once per key at a time.

        Callers arriving while a request is in flight await the same task
        instead of starting a duplicate.
        """
        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.ensure_future(factory())
            self._in_flight[key] = task
            task.add_done_callback(lambda _: self._in_flight.pop(key, None))
        return await asyncio.shield(task)

    # Schema discovery

    async def load_available_fields(self) -> bool:
        """Load target fields and the default mapping from the schema source."""
        return await self._shared("fields", self._load_available_fields)

    async def _load_available_fields(self) -> bool:
        try:
            await self._fetch_field_configuration()
        except ConfigUnavailableError as e:
            logger.error(f"Session {self.session_id}: {e}")
            self._error(str(e))
            return False

        logger.info(
            f"Session {self.session_id}: loaded {len(self.state.available_fields)} fields, "
            f"{len(self.state.default_mapping)} default mappings"
        )
        return True

    async def _fetch_field_configuration(self):
        try:
            fields = await self.schema_source.get_available_fields(
                self.target.object_to_create, self.target.mapping_metadata_object
            )
            default_mapping = await self.schema_source.get_default_mapping(
                self.target.mapping_metadata_object
            )
        except Exception as e:
            raise ConfigUnavailableError(
                f"Error loading field configuration: {get_error_message(e)}"
            ) from e

        self.state.available_fields = list(fields)
        self.state.default_mapping = default_mapping

    async def load_alias_table(self) -> AliasTable:
        """Fetch the alias table once per session; failures fall back to no aliases."""
        if self.state.alias_table is not None:
            return self.state.alias_table
        return await self._shared("aliases", self._load_alias_table)

    async def _load_alias_table(self) -> AliasTable:
        try:
            table = await self._fetch_alias_table()
        except ConfigUnavailableError as e:
            logger.error(f"Session {self.session_id}: {e}")
            self._error(str(e))
            return {}

        self.state.alias_table = table
        return table

    async def _fetch_alias_table(self) -> AliasTable:
        try:
            return await self.schema_source.get_alias_table(self.target.mapping_metadata_object)
        except Exception as e:
            raise ConfigUnavailableError(
                f"Error loading column aliases: {get_error_message(e)}"
            ) from e

    # Upload step

    async def upload(
        self,
        file_name: str,
        content: str,
        content_type: Optional[str] = None,
        size: Optional[int] = None,
    ) -> bool:
        """
        Accept an uploaded file.

        Rejected files leave every part of the session untouched.

        Returns:
            True if the file was accepted
        """
        if self._guard_busy():
            return False

        try:
            parsed = self._parse_upload(file_name, content, content_type, size)
        except InputRejectedError as e:
            logger.warning(f"Session {self.session_id}: rejected upload {file_name!r}: {e}")
            self._error(str(e))
            return False

        self.state.file_name = file_name
        self.state.file_content = content
        self.state.rows = parsed.rows
        self.state.import_result = None
        self.store.reset_for_new_headers(parsed.headers)

        logger.info(f"Parsed CSV headers: {parsed.headers}")
        if parsed.is_empty:
            self._warning("CSV file contains no columns.")
        else:
            self._success(
                f"CSV file loaded successfully. Found {len(parsed.headers)} columns."
            )
        return True

    def _parse_upload(self, file_name, content, content_type, size):
        if self.state.step != WizardStep.UPLOAD:
            raise InputRejectedError("Files can only be uploaded on the upload step")

        if size is None:
            size = len(content.encode("utf-8"))
        if size > self.max_file_size:
            limit_mb = self.max_file_size // (1024 * 1024)
            raise InputRejectedError(f"File size exceeds maximum limit of {limit_mb}MB")

        if content_type != CSV_CONTENT_TYPE and not file_name.lower().endswith(CSV_EXTENSION):
            raise InputRejectedError("Please upload a CSV file")

        return self.tokenizer.parse(content)

    # Mapping step

    async def auto_match(self) -> Optional[MatchResult]:
        """Replace the mapping with a fresh auto-match proposal."""
        if self._guard_busy():
            return None

        self.state.is_loading = True
        try:
            return await self._run_auto_match()
        finally:
            self.state.is_loading = False

    async def _run_auto_match(self) -> Optional[MatchResult]:
        headers = list(self.store.headers)
        if not headers:
            self._warning("Please upload a CSV file first before auto-matching")
            return None

        # Aliases must be available before scoring
        alias_table = await self.load_alias_table()

        result = self.matcher.match(self.state.available_fields, headers, alias_table)
        self.store.replace(result.mapping)

        self._success(
            f"Auto-match completed: {result.matched_count} of {result.total_fields} "
            f"fields matched with existing CSV columns."
        )
        return result

    def set_mapping(self, api_name: str, header: str) -> bool:
        """Map a single field; unknown headers are rejected with a warning."""
        if self._guard_busy():
            return False
        try:
            self.store.set(api_name, header)
        except HeaderNotFoundError as e:
            self._warning(str(e))
            return False
        self._success("Field mapping updated")
        return True

    def clear_mapping(self, api_name: str) -> bool:
        """Clear a field's mapping (clear-selection action)."""
        if self._guard_busy():
            return False
        self.store.clear(api_name)
        label = self._field_label(api_name)
        self._success(f"Mapping cleared for {label}")
        return True

    def apply_edits(self, edits: Iterable[MappingEdit]) -> int:
        """Apply draft values from the mapping table. Returns the number accepted."""
        if self._guard_busy():
            return 0

        edits = list(edits)
        if not edits:
            logger.info("No draft values found in cell change")
            return 0

        rejected = self.store.apply_edits(edits)
        for error in rejected:
            self._warning(str(error))

        accepted = len(edits) - len(rejected)
        if accepted:
            self._success("Field mapping updated")
        logger.info(f"Field mapping after edits: {self.store.mapping}")
        return accepted

    def _field_label(self, api_name: str) -> str:
        for field in self.state.available_fields:
            if field.api_name == api_name:
                return field.label
        return api_name

    @property
    def display_rows(self) -> list[MappingDisplayRow]:
        """Mapping table rows, rebuilt from the current state on every access."""
        return self.store.display_rows(self.state.available_fields)

    # Navigation

    @property
    def can_go_next(self) -> bool:
        if self.is_busy:
            return False
        if self.state.step == WizardStep.UPLOAD:
            return bool(self.state.file_content)
        if self.state.step == WizardStep.MAPPING:
            return bool(self.state.available_fields)
        return False

    async def next(self) -> WizardStep:
        """Advance the wizard from the current step."""
        if self._guard_busy():
            return self.state.step

        if self.state.step == WizardStep.UPLOAD:
            await self._enter_mapping()
        elif self.state.step == WizardStep.MAPPING:
            await self._process_import()

        return self.state.step

    async def _enter_mapping(self):
        if not self.state.file_content:
            self._warning("Please upload a CSV file before continuing")
            return

        logger.info(
            f"Moving to mapping step: {len(self.state.available_fields)} fields, "
            f"{len(self.store.headers)} headers"
        )

        # Held across every await so uploads and re-entry cannot interleave
        self.state.is_loading = True
        try:
            if not self.state.available_fields:
                await self.load_available_fields()
            await self._run_auto_match()
        finally:
            self.state.is_loading = False

        self.state.step = WizardStep.MAPPING
        self.state.show_previous = True

    async def _process_import(self):
        if len(self.store) == 0:
            self._warning(
                "No field mappings configured. Please map at least one field before importing."
            )
            return

        try:
            cleaned = self.validator.require_entries(self.store.mapping, self.store.headers)
        except NothingMappedError as e:
            logger.error(f"Session {self.session_id}: {e}")
            self._error(str(e))
            return

        request = ImportRequest(
            parent_record_id=self.target.parent_record_id,
            parent_field_api_name=self.target.parent_field_reference,
            target_object_api_name=self.target.object_to_create,
            mapping_metadata_reference=self.target.mapping_metadata_object,
            raw_csv_text=self.state.file_content,
            file_name=self.state.file_name,
            rows=self.state.rows,
            mapping=cleaned,
        )

        self.state.step = WizardStep.PROCESSING
        self.state.is_processing = True
        self.state.show_previous = False

        try:
            await self._execute(request)
            self._success("Records imported successfully")
        except ExecutionFailedError as e:
            self._error(str(e))
        finally:
            self.state.is_processing = False
            self.state.step = WizardStep.SUMMARY
            logger.info(f"Session {self.session_id}: import finished")

    async def _execute(self, request: ImportRequest) -> ImportResult:
        """Run the executor and record its result; failures raise ExecutionFailedError."""
        try:
            result = await self.executor.execute(request)
        except Exception as e:
            message = get_error_message(e)
            logger.error(f"Error importing records: {message}")
            self.state.import_result = ImportResult(success=False, errors=[message])
            raise ExecutionFailedError(
                f"An error occurred while importing the records: {message}"
            ) from e

        self.state.import_result = result
        if not result.success:
            logger.error(f"Import reported failure: {result.errors}")
            raise ExecutionFailedError("Some errors occurred during import")
        return result

    def previous(self) -> WizardStep:
        """Step back; refused while an import call is outstanding."""
        if self._guard_busy():
            return self.state.step

        if self.state.step == WizardStep.MAPPING:
            self.state.step = WizardStep.UPLOAD
            self.state.show_previous = False
        elif self.state.step in (WizardStep.PROCESSING, WizardStep.SUMMARY):
            self.state.step = WizardStep.MAPPING
            self.state.show_previous = True

        return self.state.step

    def finish(self) -> WizardStep:
        """Return to upload, keeping mapping and schema data for the next file."""
        if self._guard_busy():
            return self.state.step

        self.state.clear_file()
        self.state.step = WizardStep.UPLOAD
        self.state.show_previous = False
        return self.state.step

    # Reporting

    @property
    def status_text(self) -> Optional[str]:
        result = self.state.import_result
        if result is None:
            return None
        return "Success" if result.success else "Failed"

    @property
    def debug_info(self) -> dict[str, int]:
        return {
            "available_fields": len(self.state.available_fields),
            "csv_headers": len(self.store.headers),
            "display_rows": len(self.display_rows),
            "field_mapping": len(self.store),
        }

    def snapshot(self, drain: bool = True) -> WizardSnapshot:
        """Serializable view of the session; drains notifications by default."""
        result = self.state.import_result
        return WizardSnapshot(
            session_id=self.session_id,
            step=self.state.step,
            show_previous=self.state.show_previous,
            can_go_next=self.can_go_next,
            is_processing=self.state.is_processing,
            is_loading=self.state.is_loading,
            file_name=self.state.file_name,
            headers=list(self.store.headers),
            row_count=len(self.state.rows),
            mapping=self.store.mapping,
            display_rows=self.display_rows,
            import_result=result.model_dump(mode="json") if result else None,
            status_text=self.status_text,
            notifications=self.drain_notifications() if drain else self.notifications,
            debug_info=self.debug_info,
        )
