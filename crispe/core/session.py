"""Single-flight generation session.

Mirrors what a front end does around the adapter: refuse to start without an
instruction, ignore triggers while a request is outstanding, track the
current status line, and keep only the latest result or error.
"""

import logging
import threading
from typing import Optional, TYPE_CHECKING, Union

from crispe.core.errors import CrispeError
from crispe.core.schema.crispe_input import CrispeInput, Language
from crispe.core.schema.messages import GeneratedPrompts

if TYPE_CHECKING:
    from crispe.llm.adapter import CompletionAdapter
    from crispe.llm.clients.base import ProgressCallback

logger = logging.getLogger(__name__)


class GenerationSession:
    """At most one in-flight generation, no queueing.

    Attributes:
        adapter: Adapter used for every run
        result: Latest successful result (None before the first one)
        error: Message of the latest failure
        status: Latest progress line while a run is in flight
    """

    def __init__(self, adapter: "CompletionAdapter"):
        self.adapter = adapter
        self.result: Optional[GeneratedPrompts] = None
        self.error: Optional[str] = None
        self.status = ""
        self._in_flight = threading.Lock()

    @property
    def is_generating(self) -> bool:
        return self._in_flight.locked()

    def run(
        self,
        data: CrispeInput,
        language: Union[Language, str],
        on_progress: Optional["ProgressCallback"] = None,
    ) -> Optional[GeneratedPrompts]:
        """Run one generation unless the trigger is disabled.

        Returns None without calling the adapter when the instruction is
        blank or another run is in flight.

        Raises:
            CrispeError: If the generation fails (also stored in ``error``)
        """
        if not data.has_instruction():
            logger.info("Ignoring generation request without instruction")
            return None

        if not self._in_flight.acquire(blocking=False):
            logger.info("Ignoring generation request while another is in flight")
            return None

        def report(text: str) -> None:
            self.status = text
            if on_progress:
                on_progress(text)

        try:
            self.result = None
            self.error = None
            self.result = self.adapter.generate(data, language, on_progress=report)
            return self.result
        except CrispeError as e:
            self.error = str(e)
            raise
        finally:
            self.status = ""
            self._in_flight.release()

    def clear(self) -> None:
        """Drop the latest result and error."""
        self.result = None
        self.error = None
