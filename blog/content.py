"""
Rich-text document checks.

Posts carry the editor's ProseMirror/Tiptap JSON verbatim. The server only
needs to know two things about a document: is it shaped like a document,
and does it say anything.
"""

from .errors import InvalidInput
from .utils import parse_json_field

LIST_TYPES = ('bulletList', 'orderedList')


def _has_text(node):
    children = node.get('content')
    if not isinstance(children, list):
        return False
    return any(
        isinstance(child, dict)
        and child.get('type') == 'text'
        and isinstance(child.get('text'), str)
        and child['text'].strip()
        for child in children
    )


def _is_meaningful(node):
    if not isinstance(node, dict):
        return False

    if node.get('type') == 'image':
        attrs = node.get('attrs') or {}
        return isinstance(attrs, dict) and bool(attrs.get('src'))

    if _has_text(node):
        return True

    if node.get('type') in LIST_TYPES:
        for item in node.get('content') or []:
            if not isinstance(item, dict) or item.get('type') != 'listItem':
                continue
            if any(isinstance(p, dict) and _has_text(p) for p in item.get('content') or []):
                return True

    return False


def parse_document(raw):
    """
    Validate an editor document and return it as a dict.

    Accepts the document itself or its JSON encoding (multipart forms).
    Raises InvalidInput when it is not a doc node or has nothing in it.
    """
    if raw in (None, '', {}):
        raise InvalidInput("Content is required")

    doc = parse_json_field(raw, "Invalid content format (not valid JSON)")
    if not isinstance(doc, dict) or doc.get('type') != 'doc' or not isinstance(doc.get('content'), list):
        raise InvalidInput("Invalid Tiptap document structure")

    if not any(_is_meaningful(node) for node in doc['content']):
        raise InvalidInput("Post content cannot be empty")
    return doc


def extract_text(node):
    """Concatenate every text leaf of a document, blocks separated by spaces."""
    if isinstance(node, list):
        return ' '.join(filter(None, (extract_text(n) for n in node)))
    if not isinstance(node, dict):
        return ''
    if node.get('type') == 'text':
        return node.get('text') or ''
    return extract_text(node.get('content') or [])
