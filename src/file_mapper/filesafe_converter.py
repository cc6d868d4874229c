"""Filesafe filename conversion for wiki page titles.

This module converts MediaWiki page titles to file paths that can live in a
git tree, and back. The mapping is reversible for every title MediaWiki
accepts, so a page imported by a clone is pushed back to the same title.
"""

import re

# Stand-in for "/" so subpages do not become directories
SLASH_REPLACEMENT = '%2F'

# Extension of every file holding a wiki page
PAGE_EXTENSION = '.mw'

# Longest file name most file systems accept
NAME_MAX = 255

# MediaWiki refuses these in titles, even URL-encoded
FORBIDDEN_CHARS = '[]{}|'

_ESCAPE_PATTERN = re.compile(r'_%_([0-9a-f]{2})')


class FilesafeConverter:
    """Converts wiki page titles to filenames and back.

    Conversion rules (title → filename):
    - "/" → "%2F"
    - Spaces → underscores (MediaWiki treats both alike)
    - [ ] { } | → "_%_" followed by the two-digit lowercase hex code, a
      URL-encoding look-alike the wiki does not decode on its own
    - Name truncated to fit NAME_MAX once the extension is added
    - .mw extension is appended

    Examples:
        - "Main Page" → "Main_Page.mw"
        - "Help/Editing" → "Help%2FEditing.mw"
    """

    @staticmethod
    def title_to_filename(title: str) -> str:
        """Convert a wiki page title to a filesafe filename.

        Args:
            title: The wiki page title

        Returns:
            A filesafe filename with .mw extension

        Examples:
            >>> FilesafeConverter.title_to_filename("Main Page")
            'Main_Page.mw'
            >>> FilesafeConverter.title_to_filename("Help/Editing")
            'Help%2FEditing.mw'
        """
        filename = title.replace('/', SLASH_REPLACEMENT)
        filename = filename.replace(' ', '_')
        filename = ''.join(
            f"_%_{ord(char):02x}" if char in FORBIDDEN_CHARS else char
            for char in filename
        )

        limit = NAME_MAX - len(PAGE_EXTENSION)
        encoded = filename.encode('utf-8')
        if len(encoded) > limit:
            filename = encoded[:limit].decode('utf-8', errors='ignore')

        return f"{filename}{PAGE_EXTENSION}"

    @staticmethod
    def is_page_file(filename: str) -> bool:
        """Whether a path holds a wiki page (and can therefore be pushed)."""
        return filename.endswith(PAGE_EXTENSION) and len(filename) > len(PAGE_EXTENSION)

    @staticmethod
    def filename_to_title(filename: str) -> str:
        """Convert a filesafe filename back to a wiki page title.

        Escapes are decoded before underscores turn back into spaces, so an
        escaped character never picks up a stray space.

        Args:
            filename: The filesafe filename (with or without .mw extension)

        Returns:
            The wiki page title

        Examples:
            >>> FilesafeConverter.filename_to_title("Main_Page.mw")
            'Main Page'
            >>> FilesafeConverter.filename_to_title("Help%2FEditing.mw")
            'Help/Editing'
        """
        if filename.endswith(PAGE_EXTENSION):
            filename = filename[:-len(PAGE_EXTENSION)]

        title = filename.replace(SLASH_REPLACEMENT, '/')

        parts = []
        position = 0
        for match in _ESCAPE_PATTERN.finditer(title):
            parts.append(title[position:match.start()].replace('_', ' '))
            parts.append(chr(int(match.group(1), 16)))
            position = match.end()
        parts.append(title[position:].replace('_', ' '))

        return ''.join(parts)
