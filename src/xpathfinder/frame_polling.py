from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Callable

from playwright.sync_api import Error as PlaywrightError

from .settings import SynthesisSettings

if TYPE_CHECKING:
    from playwright.sync_api import ElementHandle, Page

logger = logging.getLogger("xpathfinder.frames")


def poll_until(
    check: Callable[[], bool],
    *,
    max_attempts: int,
    interval: float,
    timeout: float,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> bool:
    """Call ``check`` until it returns True, the attempts run out, or time runs out."""
    deadline = clock() + timeout
    for attempt in range(1, max_attempts + 1):
        if check():
            return True
        logger.debug("Poll attempt %d/%d failed.", attempt, max_attempts)
        if attempt == max_attempts:
            break
        remaining = deadline - clock()
        if remaining <= 0:
            logger.info("Polling stopped after %d attempts: time limit reached.", attempt)
            return False
        sleep(min(interval, remaining))
    logger.info("Polling stopped: %d attempts exhausted.", max_attempts)
    return False


def _frame_has_element(frame_element: ElementHandle, element_xpath: str) -> bool:
    try:
        frame = frame_element.content_frame()
        if frame is None:
            return False
        if frame.evaluate("() => document.readyState") != "complete":
            return False
        return frame.query_selector(f"xpath={element_xpath}") is not None
    except PlaywrightError as exc:
        logger.warning("Frame check failed: %s", exc)
        return False


def wait_for_element_in_frame(
    page: Page,
    frame_xpath: str,
    element_xpath: str,
    settings: SynthesisSettings | None = None,
    *,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> bool:
    """Wait until the frame at ``frame_xpath`` has loaded and contains ``element_xpath``."""
    config = settings or SynthesisSettings()
    try:
        frame_element = page.query_selector(f"xpath={frame_xpath}")
        is_frame = frame_element is not None and frame_element.content_frame() is not None
    except PlaywrightError as exc:
        logger.error("Frame lookup failed for %s: %s", frame_xpath, exc)
        return False

    if frame_element is None or not is_frame:
        logger.error("No frame found at %s", frame_xpath)
        return False

    found = poll_until(
        lambda: _frame_has_element(frame_element, element_xpath),
        max_attempts=config.frame_poll_attempts,
        interval=config.frame_poll_interval,
        timeout=config.frame_poll_timeout,
        sleep=sleep,
        clock=clock,
    )
    if found:
        logger.info("Element %s found in frame %s", element_xpath, frame_xpath)
    return found
