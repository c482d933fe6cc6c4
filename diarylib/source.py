#!/usr/bin/env python3
"""
Source resolvers: where the diary file path comes from

The reader only ever receives a resolved path. Interactive prompts and the
native file picker live behind the SourceResolver protocol so the reader and
report can be exercised without a console or a display.
"""

import logging
from pathlib import Path
from typing import Callable, Optional, Protocol, Sequence, Tuple

from diarylib.constants import DEFAULT_CONFIG

logger = logging.getLogger(__name__)

CSV_FILETYPES = (('CSV Files', '*.csv'), ('All Files', '*.*'))


class SourceResolver(Protocol):
    def resolve(self) -> Optional[Path]:
        """Return the chosen diary path, or None if the user chose nothing"""
        ...


def clean_dropped_path(text: str) -> str:
    """
    Tidy a path typed or drag-and-dropped into a terminal

    Terminals wrap dropped paths containing spaces in quotes; strip one
    surrounding pair (single or double) plus outer whitespace.
    """
    text = text.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in ('"', "'"):
        text = text[1:-1].strip()
    return text


class FixedPathResolver:
    """Resolver for a path that is already known (command line, tests)"""

    def __init__(self, path: Path):
        self.path = Path(path)

    def resolve(self) -> Optional[Path]:
        return self.path


class ManualPathResolver:
    """Ask for a path on the console"""

    def __init__(self, prompt_fn: Callable[[str], str] = input,
                 prompt: str = 'Path: '):
        self.prompt_fn = prompt_fn
        self.prompt = prompt

    def resolve(self) -> Optional[Path]:
        answer = clean_dropped_path(self.prompt_fn(self.prompt))
        if not answer:
            logger.info("No path entered")
            return None
        return Path(answer).expanduser()


class DialogSourceResolver:
    """Open the native file picker (tkinter)"""

    def __init__(self, title: str = DEFAULT_CONFIG['dialog_title'],
                 filetypes: Sequence[Tuple[str, str]] = CSV_FILETYPES):
        self.title = title
        self.filetypes = filetypes

    def resolve(self) -> Optional[Path]:
        try:
            import tkinter
            from tkinter import filedialog
        except ImportError as e:
            logger.error(f"File browser unavailable (tkinter not installed): {e}")
            return None

        try:
            root = tkinter.Tk()
        except tkinter.TclError as e:
            logger.error(f"File browser unavailable (no display): {e}")
            return None

        try:
            root.withdraw()
            chosen = filedialog.askopenfilename(
                title=self.title,
                filetypes=list(self.filetypes),
                defaultextension='.csv',
            )
        finally:
            root.destroy()

        if not chosen:
            logger.info("No file selected")
            return None
        return Path(chosen)
