import pytest

from repo_tokenizer.gitignore import (
    AcceptAll,
    compile_pattern,
    load_gitignore,
    parse_gitignore,
    strip_comment,
)


def test_last_matching_rule_wins():
    matcher = parse_gitignore("*.log\n!keep.log\n")
    assert matcher.accepts("keep.log")
    assert not matcher.accepts("other.log")


def test_later_rule_can_exclude_again():
    matcher = parse_gitignore("*.log\n!keep.log\nkeep.log\n")
    assert not matcher.accepts("keep.log")


def test_no_rules_accepts_everything():
    matcher = parse_gitignore("# only a comment\n\n   \n")
    assert len(matcher) == 0
    assert matcher.accepts("anything/at/all.txt")


@pytest.mark.parametrize("path", ["node_modules", "a/b/node_modules", "a/node_modules/pkg/index.js"])
def test_globstar_prefix_matches_any_depth(path):
    rule = compile_pattern("**/node_modules")
    assert rule.matches(path)


def test_single_star_stays_in_segment():
    rule = compile_pattern("*.tmp")
    assert rule.matches("x.tmp")
    assert rule.matches("dir/x.tmp")
    assert not rule.matches("dir/x.tmp.bak")


def test_question_mark_is_one_character():
    rule = compile_pattern("file?.txt")
    assert rule.matches("file1.txt")
    assert not rule.matches("file12.txt")
    assert not rule.matches("file/.txt")


def test_dot_is_literal():
    rule = compile_pattern("a.txt")
    assert rule.matches("a.txt")
    assert not rule.matches("abtxt")


def test_leading_slash_anchors_to_root():
    rule = compile_pattern("/build")
    assert rule.matches("build")
    assert rule.matches("build/out.js")
    assert not rule.matches("src/build")


def test_trailing_slash_anchors_to_end():
    rule = compile_pattern("logs/")
    assert rule.matches("logs")
    assert rule.matches("app/logs")
    assert not rule.matches("logs/today.txt")


def test_trailing_globstar_matches_contents():
    rule = compile_pattern("docs/**")
    assert rule.matches("docs/a/b.md")
    assert not rule.matches("docs")


def test_middle_globstar_matches_zero_or_more_dirs():
    rule = compile_pattern("a/**/b")
    assert rule.matches("a/b")
    assert rule.matches("a/x/y/b")
    assert not rule.matches("a/xb")


def test_backslash_paths_are_normalized():
    matcher = parse_gitignore("src/gen/\n")
    assert not matcher.accepts("src\\gen")


def test_negation_flag_and_source():
    rule = compile_pattern("  !important.log   # keep it")
    assert rule.negated
    assert rule.source == "!important.log"


@pytest.mark.parametrize("line", ["", "   ", "# comment", "   # indented comment"])
def test_blank_and_comment_lines_are_not_compiled(line):
    assert compile_pattern(line) is None


def test_escaped_hash_is_literal():
    assert strip_comment(r"\#notes.md # trailing") == r"\#notes.md"
    rule = compile_pattern(r"\#notes.md")
    assert rule.matches("#notes.md")


def test_escaped_bang_is_not_negation():
    rule = compile_pattern(r"\!bang.txt")
    assert not rule.negated
    assert rule.matches("!bang.txt")


def test_bare_slash_never_matches():
    rule = compile_pattern("/")
    assert not rule.matches("a.txt")
    assert not rule.matches("")


def test_load_missing_gitignore_accepts_all(tmp_path):
    matcher = load_gitignore(tmp_path)
    assert isinstance(matcher, AcceptAll)
    assert matcher.accepts("whatever.log")


def test_load_unreadable_gitignore_accepts_all(tmp_path):
    (tmp_path / ".gitignore").write_bytes(b"\xff\xfe\x00bad")
    assert isinstance(load_gitignore(tmp_path), AcceptAll)


def test_load_gitignore_from_root(tmp_path):
    (tmp_path / ".gitignore").write_text("*.log\n!keep.log\n", encoding="utf-8")
    matcher = load_gitignore(tmp_path)
    assert len(matcher) == 2
    assert matcher.accepts("keep.log")
    assert not matcher.accepts("debug.log")
