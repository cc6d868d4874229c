"""Wikitext normalization between the wiki and git blobs.

MediaWiki drops trailing whitespace from every saved revision and refuses
empty pages, while git keeps blobs byte for byte. The two functions here are
inverse enough that a page imported, left untouched and pushed again is a
no-op edit.
"""

# Stored in place of an empty file, the wiki disallows zero-length pages
EMPTY_CONTENT = '<!-- empty page -->'

# Stored in place of a deleted file, real deletion needs special rights
DELETED_CONTENT = '[[Category:Deleted]]'

# Commit message used when a revision has no edit summary
EMPTY_MESSAGE = '*Empty MediaWiki Message*'


def is_deleted_content(content: str) -> bool:
    """Whether a revision's text is the deletion sentinel."""
    return content.rstrip() == DELETED_CONTENT


def smudge(content: str) -> str:
    """Turn revision text into file content.

    The empty-page sentinel becomes an empty file; anything else gets a
    trailing newline if it lacks one.
    """
    if content.rstrip() == EMPTY_CONTENT:
        return ''
    if not content.endswith('\n'):
        content += '\n'
    return content


def clean(content: str, page_created: bool = False) -> str:
    """Turn file content into text to submit as a revision.

    Args:
        content: Blob content from git
        page_created: True when the file is new in this commit

    Returns:
        Text right-stripped and ending in exactly one newline; a new empty
        file is replaced by the empty-page sentinel
    """
    content = content.rstrip()
    if not content and page_created:
        content = EMPTY_CONTENT
    return f"{content}\n"
