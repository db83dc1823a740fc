"""
Value-Spine - Small value types with one parse/format pipeline.

Every value type follows the same pipeline: coerce the input, check its
length, match a grammar, convert the fields and wrap any failure in a typed
:class:`~valuespine.core.errors.ParseError`. Formatting appends to a buffer
and never fails from ``str()``. Behavior is replaceable per type through an
immutable strategy, passed explicitly or installed process-wide.

Value types:
- valuespine.semver: Semantic versions (``Ver``), plain and ``v``-tag forms
- valuespine.date: Calendar dates (``Date``), ISO 8601 text and a binary form
- valuespine.roman: Roman numerals (``Number``)
- valuespine.size: Byte sizes (``Size``) with text and JSON forms
- valuespine.identifier: UUIDs (``UUID``) with canonical and URN forms
"""

__version__ = "0.1.0"

from valuespine.core import *  # noqa
