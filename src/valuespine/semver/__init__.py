"""
Semantic versions (https://semver.org, 2.0.0).

The version type is the fullest instance of the value-spine pipeline: a
grammar, a form-gated parser, a precedence comparator, an append-style
formatter and a replaceable strategy bundling them.

Examples:
    >>> from valuespine import semver
    >>> v = semver.parse("v1.4.0-rc.2")
    >>> v.pre_release
    'rc.2'
    >>> semver.compare_version("1.0.0-beta.2", "1.0.0-beta.11")
    -1
    >>> str(semver.latest("1.2.3", "v1.10.0"))
    '1.10.0'
"""

from valuespine.semver.compare import (
    compare,
    compare_tag,
    compare_version,
    default_compare_pre_release,
    latest,
    latest_tag,
    latest_version,
)
from valuespine.semver.formatter import Format, default_formatter
from valuespine.semver.parser import (
    Form,
    Rule,
    default_parser,
    parse,
    parse_tag,
    parse_text,
    parse_version,
)
from valuespine.semver.strategy import (
    VersionStrategy,
    get_strategy,
    override_strategy,
    reset_strategy,
    set_strategy,
)
from valuespine.semver.version import (
    MAX_UINT64,
    ZERO,
    ZERO_STRING,
    ZERO_STRING_TAG,
    Ver,
    new,
)

__all__ = [
    "Ver",
    "new",
    "ZERO",
    "ZERO_STRING",
    "ZERO_STRING_TAG",
    "MAX_UINT64",
    "Format",
    "default_formatter",
    "Form",
    "Rule",
    "default_parser",
    "parse",
    "parse_tag",
    "parse_text",
    "parse_version",
    "compare",
    "compare_tag",
    "compare_version",
    "default_compare_pre_release",
    "latest",
    "latest_tag",
    "latest_version",
    "VersionStrategy",
    "get_strategy",
    "set_strategy",
    "reset_strategy",
    "override_strategy",
]
