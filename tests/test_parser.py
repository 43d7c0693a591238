from live_browser_agent.agent.parser import first_action_line, parse_action
from live_browser_agent.models import DEFAULT_DONE_SUMMARY, ActionType, ParsedAction


def test_click_is_case_sensitive():
    assert parse_action("click #x") == ParsedAction.click("#x")
    unrecognized = parse_action("Click #x")
    assert unrecognized.type is ActionType.UNRECOGNIZED
    assert unrecognized.raw_text == "Click #x"


def test_type_splits_selector_and_text():
    action = parse_action("type #search hello world")
    assert action.type is ActionType.TYPE
    assert action.selector == "#search"
    assert action.text == "hello world"

    empty = parse_action("type #search")
    assert empty.selector == "#search"
    assert empty.text == ""


def test_done_uses_default_summary_when_empty():
    assert parse_action("done").summary == DEFAULT_DONE_SUMMARY
    assert parse_action("done found 3 items").summary == "found 3 items"


def test_done_is_a_plain_prefix_with_punctuation_trimmed():
    assert parse_action("done.") == ParsedAction.done()
    assert parse_action("done: found 3 items").summary == "found 3 items"
    assert parse_action("done,the title is X").summary == "the title is X"
    assert parse_action("done - all set").summary == "all set"
    assert parse_action("doneness").type is ActionType.DONE


def test_type_keeps_whitespace_after_the_separating_space():
    action = parse_action("type #s   hi")
    assert action.selector == "#s"
    assert action.text == "  hi"

    assert parse_action("type ").type is ActionType.UNRECOGNIZED


def test_scroll_keeps_free_form_direction():
    sideways = parse_action("scroll sideways")
    assert sideways.direction == "sideways"
    assert sideways.scrolls_up is False
    assert parse_action("scroll up").scrolls_up is True


def test_navigate_adds_missing_scheme():
    assert parse_action("navigate example.com").url == "https://example.com"
    assert parse_action("navigate http://example.com/a").url == "http://example.com/a"
    assert parse_action("navigate about:blank").url == "about:blank"


def test_first_non_empty_line_inside_code_fence_is_used():
    reply = "```\n\n  click   button[type=submit]  \nignored line\n```"
    assert first_action_line(reply) == "click   button[type=submit]"
    assert parse_action(reply) == ParsedAction.click("button[type=submit]")


def test_keyword_without_argument_is_unrecognized():
    assert parse_action("click ").type is ActionType.UNRECOGNIZED
    assert parse_action("navigate").type is ActionType.UNRECOGNIZED
    assert parse_action("").raw_text == ""


def test_explanatory_prose_is_unrecognized():
    action = parse_action("I think I should click the search box.")
    assert action.type is ActionType.UNRECOGNIZED
    assert action.summary == "I think I should click the search box."
