""" Decode an XML property list (as found in iPhoto's AlbumData.xml)
    from an ElementTree element into plain python values:

        <string>   --> str
        <integer>  --> int
        <real>     --> float
        <true/>    --> True
        <false/>   --> False
        <date>     --> str (text kept as is)
        <data>     --> bytes
        <array>    --> list
        <dict>     --> dict (keys in document order)

    Any other element decodes to None. """

import base64
import binascii
import enum

from .errors import CatalogParseError


class PlistTag(enum.Enum):
    """ element names of the plist value types """

    STRING = "string"
    INTEGER = "integer"
    REAL = "real"
    TRUE = "true"
    FALSE = "false"
    DATE = "date"
    DATA = "data"
    ARRAY = "array"
    DICT = "dict"
    KEY = "key"
    UNKNOWN = None

    @classmethod
    def from_element(cls, node):
        """ return the PlistTag for node, UNKNOWN if not a plist type """
        try:
            return cls(node.tag)
        except ValueError:
            return cls.UNKNOWN


def _text(node):
    return node.text or ""


def _number(node, convert):
    text = _text(node).strip()
    try:
        return convert(text)
    except ValueError:
        raise CatalogParseError(
            f"Invalid <{node.tag}> value '{text}'"
        ) from None


def decode_value(node):
    """ decode a single plist value element """
    tag = PlistTag.from_element(node)
    if tag is PlistTag.STRING or tag is PlistTag.DATE:
        return _text(node)
    elif tag is PlistTag.INTEGER:
        return _number(node, int)
    elif tag is PlistTag.REAL:
        return _number(node, float)
    elif tag is PlistTag.TRUE:
        return True
    elif tag is PlistTag.FALSE:
        return False
    elif tag is PlistTag.DATA:
        try:
            return base64.b64decode("".join(_text(node).split()))
        except binascii.Error as e:
            raise CatalogParseError(f"Invalid <data> value: {e}") from e
    elif tag is PlistTag.ARRAY:
        return decode_sequence(node)
    elif tag is PlistTag.DICT:
        return decode_mapping(node)
    # <key> outside of a dict or an element plist doesn't know
    return None


def decode_sequence(node):
    """ decode the children of an <array> element into a list """
    return [decode_value(child) for child in node]


def decode_mapping(node):
    """ decode the children of a <dict> element into a dict 
        children alternate <key> and value elements """
    mapping = {}
    key = None
    for child in node:
        if PlistTag.from_element(child) is PlistTag.KEY:
            key = _text(child)
            continue
        if key is None:
            raise CatalogParseError(f"<{child.tag}> in <dict> without a preceding <key>")
        mapping[key] = decode_value(child)
        key = None
    return mapping
