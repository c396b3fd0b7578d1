"""
Batch coordinator for client-side uploads.

Keeps the in-memory queue of upload tasks and drives them one at a time:
request a session, transfer the bytes, record the outcome. A failing task
never aborts the batch.
"""

import logging
import time
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Set, Union

from ..domain.models import (
    Destination, DestinationKind, FileHandle, SessionRequest, UploadState, UploadTask
)
from ..errors import ProviderProtocolError, UploadError
from ..interfaces.upload import ISessionSource, ITransferEngine
from .destination import select_destination
from .transfer_policy import progress_percent

logger = logging.getLogger(__name__)

TaskListener = Callable[[UploadTask], None]


class BatchCoordinator:
    """
    Sequential upload queue.

    Tasks are processed strictly in enqueue order and only one task is
    ever ``uploading``. When the destination is a new folder, the folder id
    returned with the first successful session is reused for the rest of
    the batch.
    """

    def __init__(
        self,
        session_source: ISessionSource,
        transfer_engine: ITransferEngine,
        folder_id: Optional[str] = None,
        new_folder_name: Optional[str] = None
    ):
        self._session_source = session_source
        self._transfer_engine = transfer_engine
        self._destination = select_destination(folder_id, new_folder_name)

        self._tasks: List[UploadTask] = []
        self._listeners: List[TaskListener] = []
        self._running = False
        self._resolved_folder_id: Optional[str] = None
        self._used_upload_urls: Set[str] = set()

    @property
    def tasks(self) -> List[UploadTask]:
        return list(self._tasks)

    @property
    def destination(self) -> Destination:
        return self._destination

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def status(self) -> UploadState:
        """Aggregate status derived from task states."""
        states = [task.state for task in self._tasks]

        if UploadState.UPLOADING in states:
            return UploadState.UPLOADING
        if UploadState.ERROR in states:
            return UploadState.ERROR
        if states and all(state is UploadState.SUCCESS for state in states):
            return UploadState.SUCCESS
        return UploadState.IDLE

    def set_destination(
        self,
        folder_id: Optional[str] = None,
        new_folder_name: Optional[str] = None
    ) -> Destination:
        """Change the shared destination used by the next batch run."""
        if self._running:
            raise RuntimeError("Cannot change destination while a batch is running")

        self._destination = select_destination(folder_id, new_folder_name)
        return self._destination

    def subscribe(self, listener: TaskListener) -> None:
        """Register a callback invoked on every task state or progress change."""
        self._listeners.append(listener)

    def add_file(self, file: Union[FileHandle, str, Path]) -> UploadTask:
        """Enqueue a file and return its task."""
        if not isinstance(file, FileHandle):
            file = FileHandle.from_path(file)

        task = UploadTask(file=file)
        self._tasks.append(task)
        logger.debug(f"Queued {file.name} as task {task.task_id}")
        return task

    def add_files(self, files: Iterable[Union[FileHandle, str, Path]]) -> List[UploadTask]:
        return [self.add_file(file) for file in files]

    def get_task(self, task_id: str) -> Optional[UploadTask]:
        for task in self._tasks:
            if task.task_id == task_id:
                return task
        return None

    def remove_task(self, task_id: str) -> bool:
        """Remove a task unless it is currently uploading."""
        task = self.get_task(task_id)
        if task is None or task.state is UploadState.UPLOADING:
            return False

        self._tasks.remove(task)
        return True

    def clear_finished(self) -> int:
        """Drop successfully uploaded tasks from the queue."""
        finished = [task for task in self._tasks if task.state is UploadState.SUCCESS]
        for task in finished:
            self._tasks.remove(task)
        return len(finished)

    async def run(self) -> UploadState:
        """
        Drive every pending task to a terminal state.

        Calling run() while a batch is already in flight does nothing.

        Returns:
            The aggregate status after the batch
        """
        if self._running:
            logger.info("Batch already running, ignoring run request")
            return self.status

        self._running = True
        self._resolved_folder_id = None

        try:
            for task in list(self._tasks):
                if task.state is UploadState.SUCCESS:
                    continue
                if self.get_task(task.task_id) is None:
                    logger.debug(f"Skipping {task.file.name}, removed from the queue")
                    continue
                await self._process(task)
        finally:
            self._running = False

        status = self.status
        logger.info(f"Batch finished with status {status.value}")
        return status

    def _session_destination(self) -> Destination:
        if self._destination.kind is DestinationKind.NEW_FOLDER and self._resolved_folder_id:
            return Destination.existing(self._resolved_folder_id)
        return self._destination

    async def _process(self, task: UploadTask) -> None:
        task.begin_attempt()
        self._notify(task)

        try:
            request = SessionRequest.for_file(task.file, self._session_destination())
            grant = await self._session_source.request_session(request)
            task.session_received_at = time.time()

            if grant.upload_url in self._used_upload_urls:
                raise ProviderProtocolError(
                    "Upload URL was already used by another transfer.",
                    {"uploadUrl": grant.upload_url}
                )
            self._used_upload_urls.add(grant.upload_url)

            task.upload_url = grant.upload_url
            task.folder_id = grant.folder_id or None

            if self._destination.kind is DestinationKind.NEW_FOLDER and not self._resolved_folder_id:
                self._resolved_folder_id = grant.folder_id or None

            task.upload_started_at = time.time()
            await self._transfer_engine.transfer(
                grant.upload_url,
                task.file,
                on_progress=lambda loaded, total: self._on_progress(task, loaded, total)
            )

        except UploadError as e:
            logger.warning(f"Upload of {task.file.name} failed: {e.message}")
            task.mark_error(e.message)
            self._notify(task)
            return

        except Exception as e:
            logger.exception(f"Unexpected error uploading {task.file.name}: {e}")
            task.mark_error(str(e) or "Upload failed.")
            self._notify(task)
            return

        task.mark_success()
        logger.info(f"Uploaded {task.file.name} ({task.file.size} bytes)")
        self._notify(task)

    def _on_progress(self, task: UploadTask, loaded: int, total: int) -> None:
        percent = progress_percent(loaded, total)
        if percent != task.progress:
            task.progress = percent
            self._notify(task)

    def _notify(self, task: UploadTask) -> None:
        for listener in self._listeners:
            try:
                listener(task)
            except Exception as e:
                logger.error(f"Task listener failed: {e}")
