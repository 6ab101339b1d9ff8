from xpathfinder.api import synthesize_best_effort_selector, verify_unique
from xpathfinder.lxml_backend import LxmlTree


def _best_effort(markup: str, xpath: str, with_query: bool = True) -> tuple[LxmlTree, str]:
    tree = LxmlTree.from_html(markup)
    chain = tree.descriptors_for(tree.query_first(xpath))
    return tree, synthesize_best_effort_selector(chain, tree if with_query else None)


def test_identifier_with_flags_comes_first() -> None:
    _tree, selector = _best_effort(
        "<html><body><button id='save' disabled=''>Save</button></body></html>",
        "//button",
    )
    assert selector == "//button[@id='save' and @disabled]"


def test_shared_identifier_adds_same_type_position_when_tree_is_known() -> None:
    markup = "<html><body><div id='row'>a</div><div id='row'>b</div></body></html>"
    tree, selector = _best_effort(markup, "//div[2]")
    assert selector == "//div[2][@id='row']"
    assert verify_unique(selector, tree)

    _tree, blind = _best_effort(markup, "//div[2]", with_query=False)
    assert blind == "//div[@id='row']"


def test_apostrophe_in_text_is_quoted_with_concat() -> None:
    tree, selector = _best_effort(
        "<html><body><div class='quotes'><p>It's here</p><p>Plain</p></div></body></html>",
        "//p[1]",
    )
    assert selector == "//p[text()[contains(normalize-space(.), concat('It', \"'\", 's here'))]]"
    assert verify_unique(selector, tree)


def test_flags_then_class_then_custom_attribute() -> None:
    markup = """
    <html><body><form>
      <input required="" name="email">
      <span class="badge new"></span>
      <img alt="Tom's cat" src="a.png">
      <meter data-level="3"></meter>
    </form></body></html>
    """
    assert _best_effort(markup, "//input")[1] == "//input[@required]"
    assert _best_effort(markup, "//span")[1] == "//span[contains(@class, 'badge')]"
    assert _best_effort(markup, "//img")[1] == "//img[@alt=concat('Tom', \"'\", 's cat')]"
    assert _best_effort(markup, "//meter")[1] == "//meter[@data-level=3]"


def test_structural_path_skips_wrappers() -> None:
    tree, selector = _best_effort(
        "<html><body><div><span></span><span></span></div></body></html>",
        "//span[2]",
    )
    assert selector == "//div/span[2]"
    assert verify_unique(selector, tree)


def test_indented_text_is_matched_after_normalizing_whitespace() -> None:
    tree, selector = _best_effort(
        "<html><body><a>\n   Save\n   changes\n</a><a>Cancel</a></body></html>",
        "//a[1]",
    )
    assert selector == "//a[text()[contains(normalize-space(.), 'Save changes')]]"
    assert verify_unique(selector, tree)


def test_mixed_content_uses_the_first_own_text_node() -> None:
    tree, selector = _best_effort(
        "<html><body><p>Total <b>5</b> items</p><p>Other</p></body></html>",
        "//p[1]",
    )
    assert selector == "//p[text()[contains(normalize-space(.), 'Total')]]"
    assert verify_unique(selector, tree)
