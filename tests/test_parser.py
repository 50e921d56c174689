"""Tests for .desktop file parsing."""

import os
import tempfile
import unittest
from pathlib import Path

from xdg_menubar.parser import (
    DesktopFileParser,
    parse_desktop_file,
    read_desktop_group,
    split_categories,
    substitute_exec,
)


class FakeIconLookup:
    """Icon lookup backed by a dictionary."""

    def __init__(self, icons: dict[str, str]):
        self.icons = icons
        self.requests: list[str] = []

    def find_icon_path(self, icon_name: str) -> str | None:
        self.requests.append(icon_name)
        return self.icons.get(icon_name)


class ParserTestCase(unittest.TestCase):
    """Writes .desktop files into a temporary directory."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.dir = Path(self.temp_dir.name)

    def tearDown(self):
        self.temp_dir.cleanup()

    def write(self, name: str, text: str) -> str:
        path = self.dir / name
        path.write_text(text, encoding="utf-8")
        return str(path)


class TestReadDesktopGroup(unittest.TestCase):
    """Test reading the [Desktop Entry] group."""

    def test_reads_key_values(self):
        """Test key/value pairs inside the group are collected."""
        fields = read_desktop_group([
            "[Desktop Entry]\n",
            "Name=Foo\n",
            "Exec = foo --bar\n",
        ])
        self.assertEqual(fields, {"Name": "Foo", "Exec": "foo --bar"})

    def test_missing_group(self):
        """Test files without the group yield None."""
        self.assertIsNone(read_desktop_group(["Name=Foo", "Exec=foo"]))
        self.assertIsNone(read_desktop_group([]))

    def test_lines_before_group_are_ignored(self):
        """Test keys before the group header are not read."""
        fields = read_desktop_group(["Name=Early", "[Desktop Entry]", "Exec=foo"])
        self.assertEqual(fields, {"Exec": "foo"})

    def test_other_group_before_desktop_entry(self):
        """Test an unrelated group before the primary group is skipped."""
        fields = read_desktop_group([
            "[Something Else]",
            "Name=Other",
            "[Desktop Entry]",
            "Name=Foo",
        ])
        self.assertEqual(fields, {"Name": "Foo"})

    def test_stops_at_next_group(self):
        """Test fields of later groups are never read."""
        fields = read_desktop_group([
            "[Desktop Entry]",
            "Name=Foo",
            "[Desktop Action new-window]",
            "Name=New Window",
            "Exec=foo --new-window",
        ])
        self.assertEqual(fields, {"Name": "Foo"})

    def test_comments_are_skipped(self):
        """Test comment lines, including indented ones."""
        fields = read_desktop_group([
            "# leading comment",
            "[Desktop Entry]",
            "   # Name=Commented",
            "Name=Foo",
        ])
        self.assertEqual(fields, {"Name": "Foo"})

    def test_last_value_wins(self):
        """Test a repeated key keeps its last value."""
        fields = read_desktop_group(["[Desktop Entry]", "Name=First", "Name=Second"])
        self.assertEqual(fields["Name"], "Second")

    def test_localized_keys_are_not_stored(self):
        """Test keys with a locale suffix are not word tokens."""
        fields = read_desktop_group(["[Desktop Entry]", "Name=Foo", "Name[de]=Fu"])
        self.assertEqual(fields, {"Name": "Foo"})

    def test_empty_values_are_not_stored(self):
        """Test a key without a value is ignored."""
        fields = read_desktop_group(["[Desktop Entry]", "Name=", "Exec=   "])
        self.assertEqual(fields, {})

    def test_trailing_text_is_kept(self):
        """Test only leading whitespace of a value is trimmed."""
        fields = read_desktop_group(["[Desktop Entry]\r\n", "Exec=  foo %f \r\n"])
        self.assertEqual(fields["Exec"], "foo %f ")


class TestSubstituteExec(unittest.TestCase):
    """Test Exec field code substitution."""

    def test_file_codes_removed(self):
        """Test %f is removed and %c replaced by the name."""
        self.assertEqual(
            substitute_exec("myapp %f --name %c", "Foo", "/apps/foo.desktop"),
            "myapp  --name Foo"
        )

    def test_all_file_and_url_codes_removed(self):
        """Test %f, %u, %F and %U are all removed."""
        self.assertEqual(
            substitute_exec("app %f%u%F%U", "App", "/apps/app.desktop"),
            "app "
        )

    def test_source_path(self):
        """Test %k becomes the location of the .desktop file."""
        self.assertEqual(
            substitute_exec("app --desktop-file %k", "App", "/apps/app.desktop"),
            "app --desktop-file /apps/app.desktop"
        )

    def test_icon_with_and_without_path(self):
        """Test %i expands to --icon only when an icon was resolved."""
        self.assertEqual(
            substitute_exec("app %i", "App", "/a.desktop", icon_path="/icons/app.png"),
            "app --icon /icons/app.png"
        )
        self.assertEqual(substitute_exec("app %i", "App", "/a.desktop"), "app ")

    def test_terminal_prefix(self):
        """Test terminal wrapping of the whole command line."""
        self.assertEqual(
            substitute_exec("vim %f", "Vim", "/a.desktop", terminal="urxvt"),
            "urxvt -e vim "
        )

    def test_missing_name_uses_file_name(self):
        """Test %c falls back to the bracketed file name."""
        self.assertEqual(
            substitute_exec("app --class %c", None, "/apps/org.example.App.desktop"),
            "app --class [org.example.App]"
        )

    def test_name_substituted_before_file_codes(self):
        """Test substitutions apply in order over the whole string."""
        self.assertEqual(substitute_exec("app %c", "Odd %f Name", "/a.desktop"), "app Odd  Name")


class TestSplitCategories(unittest.TestCase):
    """Test Categories splitting."""

    def test_split(self):
        """Test order is kept and empty items dropped."""
        self.assertEqual(split_categories("Network;Email;"), ["Network", "Email"])
        self.assertEqual(split_categories(";;Office;;"), ["Office"])
        self.assertEqual(split_categories(""), [])


class TestDesktopFileParser(ParserTestCase):
    """Test parsing whole files."""

    def test_minimal_entry(self):
        """Test a valid entry is shown with nothing derived."""
        path = self.write("foo.desktop", "[Desktop Entry]\nName=Foo\n")
        entry = parse_desktop_file(path)

        self.assertIsNotNone(entry)
        self.assertEqual(entry.name, "Foo")
        self.assertEqual(entry.source_path, path)
        self.assertTrue(entry.show)
        self.assertIsNone(entry.icon_path)
        self.assertIsNone(entry.categories)
        self.assertIsNone(entry.command_line)
        self.assertFalse(entry.launchable)

    def test_missing_group_yields_none(self):
        """Test files without [Desktop Entry] are discarded."""
        path = self.write("foo.desktop", "Name=Foo\nExec=foo\n")
        self.assertIsNone(parse_desktop_file(path))

    def test_empty_name_yields_none(self):
        """Test an empty Name discards the file rather than hiding it."""
        path = self.write("foo.desktop", "[Desktop Entry]\nName=\nExec=foo\n")
        self.assertIsNone(parse_desktop_file(path))

    def test_missing_name_yields_none(self):
        """Test a missing Name discards the file."""
        path = self.write("foo.desktop", "[Desktop Entry]\nExec=foo\n")
        self.assertIsNone(parse_desktop_file(path))

    def test_no_display(self):
        """Test NoDisplay=true hides the entry in any case."""
        for value, shown in [("True", False), ("true", False), ("TRUE", False), ("false", True)]:
            with self.subTest(value=value):
                path = self.write("foo.desktop", f"[Desktop Entry]\nName=Foo\nNoDisplay={value}\n")
                self.assertEqual(parse_desktop_file(path).show, shown)

    def test_only_show_in(self):
        """Test OnlyShowIn must mention the window manager."""
        hidden = self.write("gnome.desktop", "[Desktop Entry]\nName=G\nOnlyShowIn=GNOME;KDE;\n")
        shown = self.write("awesome.desktop", "[Desktop Entry]\nName=A\nOnlyShowIn=awesome;GNOME;\n")

        self.assertFalse(parse_desktop_file(hidden, wm_name="awesome").show)
        self.assertTrue(parse_desktop_file(shown, wm_name="awesome").show)
        self.assertTrue(parse_desktop_file(hidden, wm_name="KDE").show)

    def test_exec_substitution(self):
        """Test the command line is built from Exec and Name."""
        path = self.write("foo.desktop", "[Desktop Entry]\nName=Foo\nExec=myapp %f --name %c\n")
        entry = parse_desktop_file(path)
        self.assertEqual(entry.command_line, "myapp  --name Foo")
        self.assertEqual(entry.exec_template, "myapp %f --name %c")
        self.assertTrue(entry.launchable)

    def test_icon_resolution(self):
        """Test Icon is resolved and used for %i."""
        icons = FakeIconLookup({"bar": "/icons/bar.png"})
        path = self.write("foo.desktop", "[Desktop Entry]\nName=Foo\nIcon=bar\nExec=myapp %i\n")

        entry = DesktopFileParser(icons).parse(path)

        self.assertEqual(entry.icon_path, "/icons/bar.png")
        self.assertEqual(entry.command_line, "myapp --icon /icons/bar.png")
        self.assertEqual(icons.requests, ["bar"])

    def test_unresolved_icon(self):
        """Test an unknown icon is not an error."""
        icons = FakeIconLookup({})
        path = self.write("foo.desktop", "[Desktop Entry]\nName=Foo\nIcon=missing\nExec=myapp %i\n")

        entry = DesktopFileParser(icons).parse(path)

        self.assertIsNone(entry.icon_path)
        self.assertEqual(entry.icon, "missing")
        self.assertEqual(entry.command_line, "myapp ")

    def test_terminal(self):
        """Test Terminal=true wraps the command in the terminal."""
        path = self.write("vim.desktop", "[Desktop Entry]\nName=Vim\nTerminal=true\nExec=vim\n")
        entry = DesktopFileParser(terminal="xterm").parse(path)
        self.assertEqual(entry.command_line, "xterm -e vim")
        self.assertTrue(entry.terminal)

    def test_terminal_is_case_sensitive(self):
        """Test only the literal value true enables the terminal."""
        path = self.write("vim.desktop", "[Desktop Entry]\nName=Vim\nTerminal=True\nExec=vim\n")
        entry = DesktopFileParser(terminal="xterm").parse(path)
        self.assertEqual(entry.command_line, "vim")
        self.assertFalse(entry.terminal)

    def test_categories(self):
        """Test Categories is split in order."""
        path = self.write("mail.desktop", "[Desktop Entry]\nName=Mail\nCategories=Network;Email;\n")
        self.assertEqual(parse_desktop_file(path).categories, ["Network", "Email"])

    def test_source_path_code(self):
        """Test %k expands to the parsed file's path."""
        path = self.write("foo.desktop", "[Desktop Entry]\nName=Foo\nExec=foo %k\n")
        self.assertEqual(parse_desktop_file(path).command_line, f"foo {path}")

    def test_unrecognized_keys_are_kept(self):
        """Test unknown keys stay available as extra fields."""
        path = self.write(
            "foo.desktop",
            "[Desktop Entry]\nType=Application\nName=Foo\nStartupNotify=true\n"
        )
        entry = parse_desktop_file(path)
        self.assertEqual(entry.fields["Type"], "Application")
        self.assertEqual(entry.extra_fields, {"Type": "Application", "StartupNotify": "true"})

    def test_binary_file_is_not_an_entry(self):
        """Test undecodable content does not raise."""
        path = self.dir / "icon.png"
        path.write_bytes(b"\x89PNG\r\n\x1a\n\xff\xfe\x00\x00")
        self.assertIsNone(parse_desktop_file(path))

    def test_missing_file_raises(self):
        """Test an unreadable file surfaces as OSError."""
        with self.assertRaises(OSError):
            parse_desktop_file(self.dir / "missing.desktop")

    def test_accepts_path_objects(self):
        """Test PathLike arguments are converted to strings."""
        path = self.write("foo.desktop", "[Desktop Entry]\nName=Foo\n")
        entry = parse_desktop_file(Path(path))
        self.assertEqual(entry.source_path, os.fspath(path))


if __name__ == "__main__":
    unittest.main()
