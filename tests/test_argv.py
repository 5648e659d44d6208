"""Tests for splitting argv into main args, subcommand and sub args."""

from machine_tools.cli.argv import split_main_and_subcommand


class TestSplitMainAndSubcommand:
    """Tests for split_main_and_subcommand."""

    def test_only_subcommand(self):
        assert split_main_and_subcommand(["status"]) == ([], "status", [])

    def test_flags_on_both_sides(self):
        result = split_main_and_subcommand(["-v", "status", "-h", "-v"])
        assert result == (["-v"], "status", ["-h", "-v"])

    def test_only_flags(self):
        assert split_main_and_subcommand(["-v", "-h"]) == (["-v", "-h"], None, [])

    def test_empty(self):
        assert split_main_and_subcommand([]) == ([], None, [])

    def test_sub_args_include_full_tail(self):
        argv = ["-v", "config", "init", "--user", "a", "b", "c"]
        result = split_main_and_subcommand(argv)
        assert result.subcommand == "config"
        assert result.sub_args == ["init", "--user", "a", "b", "c"]

    def test_named_fields(self):
        result = split_main_and_subcommand(["--verbose", "up", "web"])
        assert result.main_args == ["--verbose"]
        assert result.subcommand == "up"
        assert result.sub_args == ["web"]

    def test_input_not_modified(self):
        argv = ["-v", "-h"]
        result = split_main_and_subcommand(argv)
        result.main_args.append("--extra")
        assert argv == ["-v", "-h"]

    def test_accepts_tuple(self):
        assert split_main_and_subcommand(("up", "web")) == ([], "up", ["web"])
