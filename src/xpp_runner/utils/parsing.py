"""
Structured result document parsing.

Reduces the XML documents written by the compiler and the test runner to
CompileLog / TestLog models. A missing or unreadable document yields
None ("no data"), which callers must keep distinct from an empty log.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Optional

from xpp_runner.models.diagnostic import CompileLog, Diagnostic, Severity
from xpp_runner.models.test_result import (
    TestCaseResult,
    TestLog,
    TestMessage,
    TestOutcome,
)
from xpp_runner.utils.logging import get_logger

logger = get_logger(__name__)

TRUE_VALUES = {"true", "1", "yes"}

# Test-case fields that may appear as child elements; never failure messages.
CASE_FIELDS = {
    "name", "success", "skipped", "time", "duration", "starttime", "endtime",
    "start", "end", "classname", "outcome"
}


def local_name(tag: str) -> str:
	"""Strip the ``{namespace}`` prefix from an element or attribute name."""
	return tag.rsplit("}", 1)[-1] if isinstance(tag, str) else ""


def _norm(name: str) -> str:
	return local_name(name).replace("-", "").replace("_", "").lower()


def field_text(element: ET.Element, *names: str) -> Optional[str]:
	"""
	Read a field from an attribute or a direct child element.

	Names are matched case-insensitively and without namespaces;
	attributes win over child elements.

	Parameters:
		element: Element to read from.
		names: Accepted field names, in priority order.

	Returns:
		Stripped text of the first match, or None.
	"""
	wanted = [_norm(n) for n in names]
	attrs = {_norm(k): v for k, v in element.attrib.items()}
	for name in wanted:
		if name in attrs:
			return attrs[name].strip()
	children = {}
	for child in element:
		children.setdefault(_norm(child.tag), child)
	for name in wanted:
		if name in children:
			return (children[name].text or "").strip()
	return None


def parse_int(value: Optional[str]) -> int:
	"""Parse an integer field; absent or unparseable values become 0."""
	if value is None:
		return 0
	try:
		return int(value.strip())
	except ValueError:
		return 0


def parse_flag(value: Optional[str]) -> bool:
	return value is not None and value.strip().lower() in TRUE_VALUES


def _load(path: Path | str) -> Optional[ET.Element]:
	p = Path(path)
	if not p.is_file():
		logger.info("no result document at %s", p)
		return None
	try:
		return ET.parse(p).getroot()
	except (ET.ParseError, OSError) as exc:
		logger.warning("result document %s is unreadable: %s", p, exc)
		return None


def _diagnostic(node: ET.Element) -> Diagnostic:
	type_tag = None
	for key, value in node.attrib.items():
		if local_name(key) == "type":
			type_tag = value
			break
	return Diagnostic(
	    severity=Severity.from_text(field_text(node, "Severity")),
	    path=field_text(node, "Path") or "",
	    message=field_text(node, "Message") or "",
	    line=parse_int(field_text(node, "Line")),
	    column=parse_int(field_text(node, "Column")),
	    end_line=parse_int(field_text(node, "EndLine")),
	    end_column=parse_int(field_text(node, "EndColumn")),
	    element_type=field_text(node, "ElementType"),
	    rule=field_text(node, "Moniker", "RuleName", "Rule"),
	    diagnostic_type=type_tag or field_text(node, "DiagnosticType"),
	)


def parse_compile_log(path: Path | str) -> Optional[CompileLog]:
	"""
	Parse a compiler XML log.

	Parameters:
		path: Path to the XML log.

	Returns:
		CompileLog with every Diagnostic node in document order, or None
		if the file is missing or malformed.
	"""
	root = _load(path)
	if root is None:
		return None
	diagnostics = [
	    _diagnostic(node) for node in root.iter()
	    if _norm(node.tag) == "diagnostic"
	]
	log = CompileLog(diagnostics=diagnostics)
	logger.debug("parsed %s: %d errors, %d warnings, %d informational",
	             path, log.errors, log.warnings, log.informational)
	return log


def _is_case(element: ET.Element) -> bool:
	return _norm(element.tag) == "testcase"


def _case_result(suite: ET.Element, case: ET.Element) -> TestCaseResult:
	suite_name = field_text(suite, "name")
	method = field_text(case, "name") or ""
	name = f"{suite_name}.{method}" if suite_name else method

	if parse_flag(field_text(case, "success")):
		outcome = TestOutcome.PASSED
	elif parse_flag(field_text(case, "skipped")):
		outcome = TestOutcome.SKIPPED
	else:
		outcome = TestOutcome.FAILED

	messages: tuple[TestMessage, ...] = ()
	if outcome is TestOutcome.FAILED:
		messages = tuple(
		    TestMessage(kind=local_name(child.tag),
		                text=(child.text or "").strip()) for child in case
		    if isinstance(child.tag, str)
		    and _norm(child.tag) not in CASE_FIELDS)
	return TestCaseResult(
	    name=name,
	    outcome=outcome,
	    elapsed_ms=parse_int(field_text(case, "time")),
	    messages=messages,
	)


def find_case_groupings(root: ET.Element) -> list[ET.Element]:
	"""
	Return every element that directly contains test-case children.

	This flattens any depth of intermediate suite wrappers. Each case
	has exactly one parent, so no case belongs to two groupings.
	"""
	groupings = [el for el in root.iter() if any(_is_case(c) for c in el)]
	if len(groupings) > 1:
		parents = {child: parent for parent in root.iter() for child in parent}
		grouping_set = set(groupings)
		for grouping in groupings:
			ancestor = parents.get(grouping)
			while ancestor is not None:
				if ancestor in grouping_set:
					logger.warning(
					    "test cases found at two nesting levels (%s inside %s)",
					    field_text(grouping, "name"),
					    field_text(ancestor, "name"))
					break
				ancestor = parents.get(ancestor)
	return groupings


def parse_test_log(path: Path | str) -> Optional[TestLog]:
	"""
	Parse a test runner XML document.

	Parameters:
		path: Path to the XML results.

	Returns:
		TestLog with one TestCaseResult per test case, or None if the file
		is missing or malformed.
	"""
	root = _load(path)
	if root is None:
		return None
	cases = [
	    _case_result(suite, case)
	    for suite in find_case_groupings(root)
	    for case in suite
	    if _is_case(case)
	]
	log = TestLog(cases=cases)
	logger.debug("parsed %s: %d passed, %d failed, %d skipped", path,
	             log.passed, log.failed, log.skipped)
	return log


__all__ = [
    "local_name",
    "field_text",
    "parse_int",
    "parse_flag",
    "parse_compile_log",
    "parse_test_log",
    "find_case_groupings",
]
