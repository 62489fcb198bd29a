"""Normalization of routing rules into one canonical form.

Routing rules reach the engine in two shapes:

* the structured form, a list of ``{"condition": {...}, "redirect": {...}}``
  mappings with camelCase (or snake_case) field names, where each block may
  also arrive wrapped in a single-element list;
* the serialized form, a JSON array (or its decoded list) using the remote
  service's PascalCase names, e.g.
  ``[{"Condition": {"KeyPrefixEquals": "docs/"}, "Redirect": {...}}]``.

Both are mapped onto :class:`~.models.RoutingRule` tuples so that every
comparison downstream works on a single representation. Rule order is kept
as declared and rules are never deduplicated.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from typing import Any

from .errors import IncompleteAttributeGroup, InvalidAttributeValue
from .models import (
    Condition,
    ErrorDocument,
    IndexDocument,
    Redirect,
    RedirectAllRequestsTo,
    RoutingRule,
    WebsiteConfiguration,
)

_STRUCTURED_CONDITION_FIELDS = {
    "keyPrefixEquals": "key_prefix_equals",
    "key_prefix_equals": "key_prefix_equals",
    "httpErrorCodeReturnedEquals": "http_error_code_returned_equals",
    "http_error_code_returned_equals": "http_error_code_returned_equals",
}

_STRUCTURED_REDIRECT_FIELDS = {
    "hostName": "host_name",
    "host_name": "host_name",
    "httpRedirectCode": "http_redirect_code",
    "http_redirect_code": "http_redirect_code",
    "protocol": "protocol",
    "replaceKeyPrefixWith": "replace_key_prefix_with",
    "replace_key_prefix_with": "replace_key_prefix_with",
    "replaceKeyWith": "replace_key_with",
    "replace_key_with": "replace_key_with",
}

_SERIALIZED_CONDITION_FIELDS = {
    "KeyPrefixEquals": "key_prefix_equals",
    "HttpErrorCodeReturnedEquals": "http_error_code_returned_equals",
}

_SERIALIZED_REDIRECT_FIELDS = {
    "HostName": "host_name",
    "HttpRedirectCode": "http_redirect_code",
    "Protocol": "protocol",
    "ReplaceKeyPrefixWith": "replace_key_prefix_with",
    "ReplaceKeyWith": "replace_key_with",
}

_STRUCTURED_RULE_KEYS = ("condition", "redirect")
_SERIALIZED_RULE_KEYS = ("Condition", "Redirect")


def normalize_rules(raw: Any) -> tuple[RoutingRule, ...]:
    """Normalize routing rules given in either input form."""
    if isinstance(raw, (str, bytes)):
        return normalize_serialized_rules(raw)
    if _looks_serialized(raw):
        return normalize_serialized_rules(raw)
    return normalize_structured_rules(raw)


def normalize_structured_rules(rules: Sequence[Mapping[str, Any]]) -> tuple[RoutingRule, ...]:
    """Normalize the structured (camelCase block) form."""
    return _normalize(
        rules,
        rule_keys=_STRUCTURED_RULE_KEYS,
        condition_fields=_STRUCTURED_CONDITION_FIELDS,
        redirect_fields=_STRUCTURED_REDIRECT_FIELDS,
        form="routingRule",
    )


def normalize_serialized_rules(rules: str | bytes | Sequence[Mapping[str, Any]]) -> tuple[RoutingRule, ...]:
    """Normalize the serialized (PascalCase JSON array) form."""
    if isinstance(rules, (str, bytes)):
        try:
            rules = json.loads(rules)
        except ValueError as e:
            raise InvalidAttributeValue(f"routingRules is not valid JSON: {e}") from e
    return _normalize(
        rules,
        rule_keys=_SERIALIZED_RULE_KEYS,
        condition_fields=_SERIALIZED_CONDITION_FIELDS,
        redirect_fields=_SERIALIZED_REDIRECT_FIELDS,
        form="routingRules",
    )


def serialize_rules(rules: Sequence[RoutingRule] | None) -> str | None:
    """Render canonical rules as the compact serialized JSON array."""
    if not rules:
        return None
    return json.dumps([rule.to_document() for rule in rules], separators=(",", ":"))


def configuration_from_document(document: Mapping[str, Any] | None) -> WebsiteConfiguration:
    """Build the canonical configuration from a GetBucketWebsite response.

    Raises:
        InvalidAttributeValue: If a block of the document has the wrong shape
    """
    if not document:
        return WebsiteConfiguration()
    if not isinstance(document, Mapping):
        raise InvalidAttributeValue(f"website document must be a mapping, got {type(document).__name__}")

    index_document = None
    index_block = _document_block(document, "IndexDocument")
    if index_block is not None:
        index_document = IndexDocument(suffix=index_block.get("Suffix", ""))

    error_document = None
    error_block = _document_block(document, "ErrorDocument")
    if error_block is not None:
        error_document = ErrorDocument(key=error_block.get("Key", ""))

    redirect_all = None
    redirect_block = _document_block(document, "RedirectAllRequestsTo")
    if redirect_block is not None:
        redirect_all = RedirectAllRequestsTo(
            host_name=redirect_block.get("HostName", ""),
            protocol=redirect_block.get("Protocol"),
        )

    routing_rules = None
    if document.get("RoutingRules"):
        routing_rules = normalize_serialized_rules(document["RoutingRules"])

    return WebsiteConfiguration(
        index_document=index_document,
        error_document=error_document,
        redirect_all_requests_to=redirect_all,
        routing_rules=routing_rules,
    )


def _document_block(document: Mapping[str, Any], key: str) -> Mapping[str, Any] | None:
    block = document.get(key)
    if not block:
        return None
    if not isinstance(block, Mapping):
        raise InvalidAttributeValue(f"{key} must be a mapping, got {type(block).__name__}")
    return block


def _looks_serialized(rules: Any) -> bool:
    if not isinstance(rules, Sequence):
        return False
    return any(
        isinstance(rule, Mapping) and any(key in rule for key in _SERIALIZED_RULE_KEYS)
        for rule in rules
    )


def _normalize(
    rules: Any,
    rule_keys: tuple[str, str],
    condition_fields: dict[str, str],
    redirect_fields: dict[str, str],
    form: str,
) -> tuple[RoutingRule, ...]:
    if rules is None:
        return ()
    if isinstance(rules, Mapping) or not isinstance(rules, Sequence):
        raise InvalidAttributeValue(f"{form} must be a list of rules, got {type(rules).__name__}")

    condition_key, redirect_key = rule_keys
    normalized = []
    for index, rule in enumerate(rules):
        where = f"{form}[{index}]"
        if not isinstance(rule, Mapping):
            raise InvalidAttributeValue(f"{where} must be a mapping, got {type(rule).__name__}")

        unknown = set(rule) - set(rule_keys)
        if unknown:
            raise InvalidAttributeValue(f"{where} has unsupported fields: {', '.join(sorted(unknown))}")

        redirect_block = _unwrap_block(rule.get(redirect_key), f"{where}.{redirect_key}")
        if not redirect_block:
            raise IncompleteAttributeGroup(f"{where} is missing the required {redirect_key} block")

        condition_block = _unwrap_block(rule.get(condition_key), f"{where}.{condition_key}")
        condition = None
        if condition_block is not None:
            condition = Condition(**_map_fields(condition_block, condition_fields, f"{where}.{condition_key}"))
            if condition.is_empty():
                condition = None

        redirect = Redirect(**_map_fields(redirect_block, redirect_fields, f"{where}.{redirect_key}"))
        normalized.append(RoutingRule(redirect=redirect, condition=condition))

    return tuple(normalized)


def _unwrap_block(block: Any, where: str) -> Mapping[str, Any] | None:
    """Accept a block either bare or wrapped in a list of at most one element."""
    if block is None:
        return None
    if isinstance(block, Sequence) and not isinstance(block, (str, bytes)):
        if not block:
            return None
        if len(block) > 1:
            raise InvalidAttributeValue(f"{where} accepts at most one block, got {len(block)}")
        block = block[0]
    if not isinstance(block, Mapping):
        raise InvalidAttributeValue(f"{where} must be a mapping, got {type(block).__name__}")
    return block


def _map_fields(block: Mapping[str, Any], mapping: dict[str, str], where: str) -> dict[str, str | None]:
    values: dict[str, str | None] = {}
    for key, value in block.items():
        if key not in mapping:
            raise InvalidAttributeValue(f"{where} has unsupported field {key!r}")
        values[mapping[key]] = _normalize_value(value, f"{where}.{key}")
    return values


def _normalize_value(value: Any, where: str) -> str | None:
    # "" is a declared value distinct from an unset field and is kept as is.
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    raise InvalidAttributeValue(f"{where} must be a string, got {type(value).__name__}")
