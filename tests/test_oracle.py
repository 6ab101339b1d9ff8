from typing import Any

from xpathfinder.api import list_matches, locate
from xpathfinder.diagnostics import RecordingObserver
from xpathfinder.errors import QuerySyntaxError
from xpathfinder.lxml_backend import LxmlTree
from xpathfinder.oracle import UniquenessOracle
from xpathfinder.settings import SynthesisSettings


class FakeQuery:
    def __init__(self, counts: dict[str, int], invalid: tuple[str, ...] = ()) -> None:
        self.counts = counts
        self.invalid = invalid
        self.calls: list[str] = []

    def query_all(self, expression: str, scope: Any = None) -> list[str]:
        self.calls.append(expression)
        if expression in self.invalid:
            raise QuerySyntaxError(expression, "bad expression")
        return [f"node{i}" for i in range(self.counts.get(expression, 0))]

    def query_first(self, expression: str, scope: Any = None) -> str | None:
        matches = self.query_all(expression, scope)
        return matches[0] if matches else None

    def describe(self, node: str) -> str:
        return node


def test_classifies_none_unique_and_ambiguous() -> None:
    oracle = UniquenessOracle(FakeQuery({"//a": 1, "//b": 3}))

    missing = oracle.evaluate("//c")
    assert missing.status == "none"
    assert missing.error is None

    unique = oracle.evaluate("//a")
    assert unique.ok
    assert unique.node == "node0"

    ambiguous = oracle.evaluate("//b")
    assert ambiguous.status == "ambiguous"
    assert ambiguous.match_count == 3
    assert ambiguous.samples == ("node0", "node1", "node2")


def test_ambiguous_samples_are_capped_at_five() -> None:
    oracle = UniquenessOracle(FakeQuery({"//li": 12}))
    verification = oracle.evaluate("//li")
    assert verification.match_count == 12
    assert len(verification.samples) == 5


def test_sample_limit_follows_settings_but_never_exceeds_five() -> None:
    query = FakeQuery({"//li": 12})
    assert len(UniquenessOracle(query, settings=SynthesisSettings(max_diagnostic_samples=2)).evaluate("//li").samples) == 2
    assert len(UniquenessOracle(query, settings=SynthesisSettings(max_diagnostic_samples=40)).evaluate("//li").samples) == 5


def test_syntax_errors_and_empty_selectors_classify_as_none() -> None:
    oracle = UniquenessOracle(FakeQuery({}, invalid=("//div[",)))

    rejected = oracle.evaluate("//div[")
    assert rejected.status == "none"
    assert rejected.error == "bad expression"

    empty = oracle.evaluate("   ")
    assert empty.status == "none"
    assert empty.error == "empty selector"
    assert oracle.find_all("//div[") == []


def test_evaluation_is_repeatable() -> None:
    oracle = UniquenessOracle(FakeQuery({"//b": 7}))
    assert oracle.evaluate("//b") == oracle.evaluate("//b")


def test_identifier_multiplicity_quotes_the_identifier() -> None:
    query = FakeQuery({"//*[@id='row']": 2, "//*[@id=concat('it', \"'\", 's')]": 1})
    oracle = UniquenessOracle(query)
    assert oracle.identifier_multiplicity("row") == 2
    assert oracle.identifier_multiplicity("it's") == 1
    assert oracle.identifier_multiplicity(None) == 0


def test_observer_sees_every_evaluation() -> None:
    observer = RecordingObserver()
    oracle = UniquenessOracle(FakeQuery({"//a": 1}), observer=observer)
    oracle.evaluate("//a", stage="identifier")
    oracle.evaluate("//z")
    assert observer.selectors == ["//a", "//z"]
    assert observer.checks[0][0] == "identifier"
    assert observer.checks[1][0] is None


def test_lxml_tree_reports_malformed_xpath_as_none() -> None:
    tree = LxmlTree.from_html("<html><body><div class='a'></div><div class='a'></div></body></html>")
    oracle = UniquenessOracle(tree)

    assert oracle.evaluate("//div[").status == "none"
    assert oracle.evaluate("//div[").error

    ambiguous = oracle.evaluate("//div[contains(@class, 'a')]")
    assert ambiguous.match_count == 2
    assert ambiguous.samples == ("div.a", "div.a")


def test_scope_limits_the_search() -> None:
    tree = LxmlTree.from_html("<html><body><ul id='x'><li>1</li></ul><ul><li>2</li></ul></body></html>")
    scope = tree.query_first("//ul[@id='x']")
    oracle = UniquenessOracle(tree)
    assert oracle.evaluate("//li").status == "ambiguous"
    assert oracle.evaluate(".//li", scope).ok


def test_api_lookups_over_lxml_tree() -> None:
    tree = LxmlTree.from_html("<html><body><p class='a'>1</p><p>2</p></body></html>")
    assert len(list_matches("//p", tree)) == 2
    assert list_matches("//p[", tree) == []
    assert UniquenessOracle(tree).is_unique("//p[contains(@class, 'a')]")

    report = locate("//p[2]", tree)
    assert report is not None
    assert report.chain[-1].direct_text == "2"
    assert locate("//table", tree) is None
