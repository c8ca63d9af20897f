from __future__ import annotations

import logging
import random
import threading
from collections import deque
from typing import Callable, Optional, Sequence

from ..core.constants import BADGE_CAP, MOTIVATIONAL_QUOTES

logger = logging.getLogger(__name__)


class Notifier:
    """Presentation-side sink for summaries and transient notices.

    Keeps the preview line, the last copied text, the unread counter and a
    short queue of toasts; copy/share hooks are injectable for a real UI.
    """

    def __init__(
        self,
        *,
        copy: Optional[Callable[[str], None]] = None,
        share: Optional[Callable[[str], None]] = None,
        max_notices: int = 20,
        quotes: Sequence[str] = MOTIVATIONAL_QUOTES,
        choose: Callable[[Sequence[str]], str] = random.choice,
    ):
        self._copy = copy
        self._share = share
        self._quotes = tuple(quotes)
        self._choose = choose
        self._lock = threading.Lock()
        self._notices: deque[str] = deque(maxlen=max_notices)
        self.preview: str = ""
        self.last_copied: str = ""
        self.unread: int = 0
        self.quote: Optional[str] = None

    def announce(self, message: str, *, share: bool = False) -> None:
        with self._lock:
            self.preview = message
            self.unread += 1
        self.copy_to_clipboard(message)
        if share:
            self._do_share(message)

    def copy_to_clipboard(self, text: str) -> None:
        with self._lock:
            self.last_copied = text
        if self._copy is not None:
            self._copy(text)
        self.notice("Copied to clipboard!")

    def _do_share(self, text: str) -> None:
        if self._share is None:
            logger.debug("No share target configured")
            return
        try:
            self._share(text)
        except Exception as e:
            # A failed share never blocks the transition that produced it.
            logger.warning("Share failed: %s", e)
            self.notice("Share failed")

    def show_quote(self) -> None:
        if self._quotes:
            self.quote = self._choose(self._quotes)

    def hide_quote(self) -> None:
        self.quote = None

    def notice(self, message: str) -> None:
        with self._lock:
            self._notices.append(message)

    def drain_notices(self) -> list[str]:
        with self._lock:
            items = list(self._notices)
            self._notices.clear()
        return items

    def reset_unread(self) -> None:
        with self._lock:
            self.unread = 0

    def badge_label(self) -> Optional[str]:
        """``None`` hides the badge; more than nine unread shows ``9+``."""
        if self.unread <= 0:
            return None
        return f"{BADGE_CAP}+" if self.unread > BADGE_CAP else str(self.unread)
