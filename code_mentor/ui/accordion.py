"""Single-selection disclosure state for result sections."""

from typing import Optional, Union

from code_mentor.models import SectionKey

DEFAULT_SECTION = SectionKey.SUMMARY


class AccordionController:
    """Tracks which one result section is expanded, if any."""

    def __init__(self, open_section: Optional[SectionKey] = DEFAULT_SECTION):
        self._open_section = SectionKey(open_section) if open_section is not None else None

    @property
    def open_section(self) -> Optional[SectionKey]:
        return self._open_section

    def toggle(self, key: Union[SectionKey, str]) -> Optional[SectionKey]:
        """Collapse ``key`` if it is open, otherwise open it in place of any other.

        Returns:
            The section open after the toggle, or None.
        """
        key = SectionKey(key)
        self._open_section = None if self._open_section is key else key
        return self._open_section

    def reset(self) -> None:
        self._open_section = DEFAULT_SECTION

    def is_open(self, key: Union[SectionKey, str]) -> bool:
        return self._open_section is SectionKey(key)
