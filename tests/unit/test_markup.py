"""Unit tests for HTML-like markup stripping."""

from docgrep_lib.markup import DEFAULT_STRIP_TAGS, strip_markup, tags_for_extension


def test_tags_removed_text_kept():
    assert strip_markup('<div class="a"><p>Hello</p> <b>world</b></div>') == "Hello world"


def test_line_breaks_become_whitespace():
    # <br> turns into a newline, which whitespace collapsing then folds
    assert strip_markup("Hello<br/>world<br>again") == "Hello world again"


def test_head_block_removed_up_to_script_close():
    html = "<head><title>T</title><script>x()</script></head><body>Text</body>"
    assert strip_markup(html, ("head", "script")) == "Text"


def test_head_block_without_script_close_is_kept():
    html = "<head><title>Title</title></head><p>Body</p>"
    assert strip_markup(html, ("head", "script")) == "TitleBody"


def test_custom_tag_closes_at_script():
    html = "<scalable_block data-x='1'>hidden</script>visible"
    assert strip_markup(html, tags_for_extension("xrtm")) == "visible"


def test_entities_decoded_last():
    assert strip_markup("<p>&lt;b&gt; &amp; more&nbsp;text</p>") == "<b> & more\xa0text"


def test_whitespace_collapsed():
    assert strip_markup("<p>a \n\t  b</p>\n\n<p>c</p>") == "a b c"


def test_idempotent_on_plain_text():
    for text in ["plain text", "  spaced   words\nnewline ", "unicode 世界 text"]:
        once = strip_markup(text)
        assert strip_markup(once) == once


def test_tags_for_extension():
    assert tags_for_extension("html") == ("head", "script")
    assert tags_for_extension(".XRTM") == ("head", "script", "scalable_block")
    assert tags_for_extension("vue") == DEFAULT_STRIP_TAGS
