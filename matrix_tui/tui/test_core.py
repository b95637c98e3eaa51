from __future__ import annotations

import curses
import unittest

from matrix_tui.tui.editor import MASK_GLYPH, TextEditor, mask
from matrix_tui.tui.focus import (
    FOCUS_LOGIN,
    FOCUS_ORDER,
    FOCUS_PASSWORD,
    FOCUS_SERVER,
    FOCUS_USERNAME,
    DIRECTIONS,
    FocusState,
    nearest,
    tab_target,
    top_left,
    true_top_left,
)
from matrix_tui.tui.geometry import GeometryRegistry, Rect
from matrix_tui.tui.keys import normalize_key
from matrix_tui.tui.modes import COMMAND, DISPATCH, EDITING, SIGNAL_ACTIVATE, SIGNAL_QUIT, InputMachine, lookup_action
from matrix_tui.tui.screens import LOGIN_FIELDS


def _rect(x: int, y: int, w: int = 5, h: int = 3) -> Rect:
    return Rect(y=y, x=x, h=h, w=w)


def _column_layout() -> GeometryRegistry:
    # Same shape as the login form: three inputs in a column, a narrower
    # button centred underneath.
    registry = GeometryRegistry()
    registry.register(FOCUS_SERVER, _rect(10, 2, w=60))
    registry.register(FOCUS_USERNAME, _rect(10, 6, w=60))
    registry.register(FOCUS_PASSWORD, _rect(10, 10, w=60))
    registry.register(FOCUS_LOGIN, _rect(35, 14, w=10))
    return registry


class GeometryRegistryTests(unittest.TestCase):
    def test_lookup_after_register_and_clear(self) -> None:
        registry = GeometryRegistry()
        registry.register(FOCUS_SERVER, _rect(0, 0))
        self.assertEqual(registry.lookup(FOCUS_SERVER), _rect(0, 0))
        registry.clear()
        self.assertIsNone(registry.lookup(FOCUS_SERVER))
        self.assertEqual(len(registry), 0)

    def test_register_overwrites(self) -> None:
        registry = GeometryRegistry()
        registry.register(FOCUS_SERVER, _rect(0, 0))
        registry.register(FOCUS_SERVER, _rect(4, 9))
        self.assertEqual(registry.lookup(FOCUS_SERVER), _rect(4, 9))
        self.assertEqual(len(registry), 1)

    def test_items_follow_registration_order(self) -> None:
        registry = _column_layout()
        self.assertEqual([fid for fid, _ in registry.items()], list(FOCUS_ORDER))

    def test_hit_returns_region_under_point(self) -> None:
        registry = _column_layout()
        self.assertEqual(registry.hit(7, 20), FOCUS_USERNAME)
        self.assertEqual(registry.hit(15, 36), FOCUS_LOGIN)
        self.assertIsNone(registry.hit(0, 0))


class NavigatorTests(unittest.TestCase):
    def test_three_regions_in_a_row(self) -> None:
        registry = GeometryRegistry()
        registry.register("a", _rect(0, 0))
        registry.register("b", _rect(10, 0))
        registry.register("c", _rect(20, 0))
        self.assertEqual(nearest("b", "left", registry), "a")
        self.assertEqual(nearest("b", "right", registry), "c")
        self.assertIsNone(nearest("b", "up", registry))
        self.assertIsNone(nearest("b", "down", registry))

    def test_two_regions_are_mutually_reachable(self) -> None:
        registry = GeometryRegistry()
        registry.register("a", _rect(3, 4))
        registry.register("b", _rect(9, 1))
        self.assertEqual(nearest("a", "right", registry), "b")
        self.assertEqual(nearest("b", "left", registry), "a")

    def test_never_selects_itself(self) -> None:
        registry = _column_layout()
        for focus_id in FOCUS_ORDER:
            for direction in DIRECTIONS:
                self.assertNotEqual(nearest(focus_id, direction, registry), focus_id)

    def test_same_coordinate_is_not_eligible(self) -> None:
        registry = GeometryRegistry()
        registry.register("a", _rect(5, 5))
        registry.register("b", _rect(5, 9))
        self.assertIsNone(nearest("a", "right", registry))
        self.assertIsNone(nearest("a", "left", registry))
        self.assertEqual(nearest("a", "down", registry), "b")

    def test_ties_go_to_first_registered(self) -> None:
        registry = GeometryRegistry()
        registry.register("a", _rect(0, 0))
        registry.register("b", _rect(10, 0))
        registry.register("c", _rect(10, 8))
        self.assertEqual(nearest("a", "right", registry), "b")

    def test_missing_geometry_yields_none(self) -> None:
        registry = GeometryRegistry()
        for direction in DIRECTIONS:
            self.assertIsNone(nearest(FOCUS_SERVER, direction, registry))
        registry.register(FOCUS_USERNAME, _rect(0, 5))
        self.assertIsNone(nearest(FOCUS_SERVER, "down", registry))

    def test_column_navigation(self) -> None:
        registry = _column_layout()
        self.assertEqual(nearest(FOCUS_SERVER, "down", registry), FOCUS_USERNAME)
        self.assertEqual(nearest(FOCUS_PASSWORD, "down", registry), FOCUS_LOGIN)
        self.assertEqual(nearest(FOCUS_LOGIN, "up", registry), FOCUS_PASSWORD)
        self.assertIsNone(nearest(FOCUS_SERVER, "up", registry))

    def test_horizontal_distance_ignores_rows(self) -> None:
        # Only origins on the requested axis are compared, so the centred
        # button is "to the right" of every input.
        registry = _column_layout()
        self.assertEqual(nearest(FOCUS_SERVER, "right", registry), FOCUS_LOGIN)
        self.assertEqual(nearest(FOCUS_LOGIN, "left", registry), FOCUS_SERVER)

    def test_unknown_direction_raises(self) -> None:
        with self.assertRaises(ValueError):
            nearest(FOCUS_SERVER, "sideways", _column_layout())


class TopLeftTests(unittest.TestCase):
    def test_column_layout_wraps_to_first_field(self) -> None:
        self.assertEqual(top_left(_column_layout()), FOCUS_SERVER)
        self.assertEqual(true_top_left(_column_layout()), FOCUS_SERVER)

    def test_empty_registry(self) -> None:
        self.assertIsNone(top_left(GeometryRegistry()))
        self.assertIsNone(true_top_left(GeometryRegistry()))

    def test_last_overwrite_wins_over_true_top_left(self) -> None:
        # "wide" is leftmost, "high" is registered later and sits higher, so
        # the y scan overwrites the x scan's pick.
        registry = GeometryRegistry()
        registry.register("wide", _rect(0, 10))
        registry.register("high", _rect(30, 2))
        self.assertEqual(top_left(registry), "high")
        self.assertEqual(true_top_left(registry), "wide")

    def test_x_update_after_y_update_wins(self) -> None:
        registry = GeometryRegistry()
        registry.register("high", _rect(30, 2))
        registry.register("wide", _rect(0, 10))
        self.assertEqual(top_left(registry), "wide")

    def test_true_top_left_breaks_x_ties_by_y(self) -> None:
        registry = GeometryRegistry()
        registry.register("lower", _rect(0, 9))
        registry.register("upper", _rect(0, 1))
        self.assertEqual(true_top_left(registry), "upper")


class TabPolicyTests(unittest.TestCase):
    def test_tab_walks_down_then_wraps(self) -> None:
        registry = _column_layout()
        seen = [FOCUS_SERVER]
        current = FOCUS_SERVER
        for _ in range(4):
            nxt = tab_target(current, registry)
            assert nxt is not None
            seen.append(nxt)
            current = nxt
        self.assertEqual(seen, [FOCUS_SERVER, FOCUS_USERNAME, FOCUS_PASSWORD, FOCUS_LOGIN, FOCUS_SERVER])

    def test_tab_falls_back_to_right(self) -> None:
        registry = GeometryRegistry()
        registry.register("a", _rect(0, 0))
        registry.register("b", _rect(10, 0))
        self.assertEqual(tab_target("a", registry), "b")
        self.assertEqual(tab_target("b", registry), "a")

    def test_tab_without_geometry_uses_top_left(self) -> None:
        registry = GeometryRegistry()
        registry.register(FOCUS_USERNAME, _rect(4, 4))
        self.assertEqual(tab_target(FOCUS_SERVER, registry), FOCUS_USERNAME)
        self.assertIsNone(tab_target(FOCUS_SERVER, GeometryRegistry()))


class FocusStateTests(unittest.TestCase):
    def test_default_is_first_in_order(self) -> None:
        self.assertEqual(FocusState().current, FOCUS_ORDER[0])

    def test_set_ignores_unknown_and_none(self) -> None:
        focus = FocusState()
        self.assertFalse(focus.set(None))
        self.assertFalse(focus.set("nope"))
        self.assertTrue(focus.set(FOCUS_LOGIN))
        self.assertEqual(focus.current, FOCUS_LOGIN)
        self.assertFalse(focus.set(FOCUS_LOGIN))

    def test_login_form_matches_traversal_order(self) -> None:
        self.assertEqual(tuple(f.name for f in LOGIN_FIELDS), FOCUS_ORDER)


class TextEditorTests(unittest.TestCase):
    def setUp(self) -> None:
        self.focus = FocusState()
        self.editor = TextEditor(self.focus)

    def test_delete_scenario(self) -> None:
        for ch in "abc":
            self.editor.enter_char(ch)
        self.assertEqual(self.editor.cursor, 3)
        self.editor.delete_char()
        self.assertEqual(self.editor.current_value(), "ab")
        self.assertEqual(self.editor.cursor, 2)
        self.editor.delete_char()
        self.editor.delete_char()
        self.assertEqual(self.editor.current_value(), "")
        self.assertEqual(self.editor.cursor, 0)
        self.editor.delete_char()
        self.assertEqual(self.editor.current_value(), "")
        self.assertEqual(self.editor.cursor, 0)

    def test_insert_then_delete_restores_state(self) -> None:
        self.editor.set_value(FOCUS_SERVER, "matrix.or")
        self.editor.move_cursor_rightest()
        before = (self.editor.current_value(), self.editor.cursor)
        self.editor.enter_char("g")
        self.editor.delete_char()
        self.assertEqual((self.editor.current_value(), self.editor.cursor), before)

    def test_insert_in_the_middle(self) -> None:
        self.editor.set_value(FOCUS_SERVER, "ac")
        self.editor.move_cursor_right()
        self.editor.enter_char("b")
        self.assertEqual(self.editor.current_value(), "abc")
        self.assertEqual(self.editor.cursor, 2)

    def test_delete_in_the_middle(self) -> None:
        self.editor.set_value(FOCUS_SERVER, "abcd")
        self.editor.move_cursor_right()
        self.editor.move_cursor_right()
        self.editor.delete_char()
        self.assertEqual(self.editor.current_value(), "acd")
        self.assertEqual(self.editor.cursor, 1)

    def test_cursor_is_clamped(self) -> None:
        self.editor.set_value(FOCUS_SERVER, "xy")
        moves = [self.editor.move_cursor_left] * 4 + [self.editor.move_cursor_right] * 6 + [self.editor.move_cursor_left]
        for move in moves:
            move()
            self.assertGreaterEqual(self.editor.cursor, 0)
            self.assertLessEqual(self.editor.cursor, 2)
        self.assertEqual(self.editor.cursor, 1)

    def test_cursor_counts_characters_not_bytes(self) -> None:
        for ch in "héllo→":
            self.editor.enter_char(ch)
        self.assertEqual(self.editor.cursor, 6)
        self.editor.move_cursor_left()
        self.editor.delete_char()
        self.assertEqual(self.editor.current_value(), "héll→")

    def test_clear_removes_buffer_entry(self) -> None:
        self.editor.enter_char("z")
        self.editor.clear_current_content()
        self.assertNotIn(FOCUS_SERVER, self.editor.buffers)
        self.assertEqual(self.editor.cursor, 0)
        self.assertEqual(self.editor.current_value(), "")

    def test_buffers_are_per_field(self) -> None:
        self.editor.enter_char("s")
        self.focus.set(FOCUS_USERNAME)
        self.editor.reset_cursor()
        self.editor.enter_char("u")
        self.assertEqual(self.editor.value(FOCUS_SERVER), "s")
        self.assertEqual(self.editor.value(FOCUS_USERNAME), "u")
        self.assertEqual(self.editor.value(FOCUS_PASSWORD), "")

    def test_rightest_moves_to_end(self) -> None:
        self.editor.set_value(FOCUS_SERVER, "hello")
        self.editor.move_cursor_rightest()
        self.assertEqual(self.editor.cursor, 5)

    def test_enter_char_rejects_multiple_characters(self) -> None:
        with self.assertRaises(ValueError):
            self.editor.enter_char("ab")

    def test_password_is_masked_count_for_count(self) -> None:
        self.editor.set_value(FOCUS_PASSWORD, "s3cr€t")
        self.assertEqual(self.editor.display_value(FOCUS_PASSWORD), MASK_GLYPH * 6)
        self.assertEqual(self.editor.value(FOCUS_PASSWORD), "s3cr€t")
        self.editor.set_value(FOCUS_SERVER, "matrix.org")
        self.assertEqual(self.editor.display_value(FOCUS_SERVER), "matrix.org")
        self.assertEqual(mask(""), "")


class KeyTests(unittest.TestCase):
    def test_normalize(self) -> None:
        self.assertEqual(normalize_key(curses.KEY_UP), "up")
        self.assertEqual(normalize_key(curses.KEY_RIGHT), "right")
        self.assertEqual(normalize_key("\n"), "enter")
        self.assertEqual(normalize_key(curses.KEY_ENTER), "enter")
        self.assertEqual(normalize_key("\t"), "tab")
        self.assertEqual(normalize_key("\x1b"), "escape")
        self.assertEqual(normalize_key(27), "escape")
        self.assertEqual(normalize_key(curses.KEY_BACKSPACE), "backspace")
        self.assertEqual(normalize_key("\x7f"), "backspace")
        self.assertEqual(normalize_key("\x15"), "clear")
        self.assertEqual(normalize_key("\x08"), "clear")
        self.assertEqual(normalize_key("q"), ("char", "q"))
        self.assertEqual(normalize_key("é"), ("char", "é"))
        self.assertIsNone(normalize_key(curses.KEY_F5))
        self.assertIsNone(normalize_key("\x01"))
        self.assertIsNone(normalize_key(None))


class InputMachineTests(unittest.TestCase):
    def setUp(self) -> None:
        self.focus = FocusState()
        self.editor = TextEditor(self.focus)
        self.registry = _column_layout()
        self.machine = InputMachine(self.focus, self.editor, self.registry)

    def test_initial_mode_is_command(self) -> None:
        self.assertEqual(self.machine.mode, COMMAND)

    def test_entering_edit_mode_moves_cursor_to_end(self) -> None:
        self.editor.set_value(FOCUS_SERVER, "hello")
        self.machine.handle(("char", "i"))
        self.assertEqual(self.machine.mode, EDITING)
        self.assertEqual(self.editor.cursor, 5)

    def test_confirm_and_cancel_keep_content(self) -> None:
        for leave in ("enter", "escape"):
            self.machine.handle(("char", "i"))
            self.machine.handle(("char", "x"))
            self.machine.handle(leave)
            self.assertEqual(self.machine.mode, COMMAND)
        self.assertEqual(self.editor.value(FOCUS_SERVER), "xx")

    def test_letters_are_text_while_editing(self) -> None:
        self.machine.handle(("char", "i"))
        for ch in "qiq":
            self.assertIsNone(self.machine.handle(("char", ch)))
        self.assertEqual(self.editor.value(FOCUS_SERVER), "qiq")
        self.assertEqual(self.machine.mode, EDITING)

    def test_editing_keys(self) -> None:
        self.machine.handle(("char", "i"))
        for ch in "abc":
            self.machine.handle(("char", ch))
        self.machine.handle("left")
        self.machine.handle("backspace")
        self.assertEqual(self.editor.value(FOCUS_SERVER), "ac")
        self.machine.handle("right")
        self.assertEqual(self.editor.cursor, 2)
        self.machine.handle("clear")
        self.assertEqual(self.editor.value(FOCUS_SERVER), "")
        self.assertEqual(self.editor.cursor, 0)

    def test_arrows_move_focus_in_command_mode(self) -> None:
        self.machine.handle("down")
        self.assertEqual(self.focus.current, FOCUS_USERNAME)
        self.machine.handle("up")
        self.assertEqual(self.focus.current, FOCUS_SERVER)
        self.machine.handle("up")
        self.assertEqual(self.focus.current, FOCUS_SERVER)

    def test_arrows_do_not_move_focus_while_editing(self) -> None:
        self.machine.handle(("char", "i"))
        self.machine.handle("down")
        self.machine.handle("up")
        self.assertEqual(self.focus.current, FOCUS_SERVER)

    def test_focus_change_resets_cursor(self) -> None:
        self.editor.set_value(FOCUS_SERVER, "long server name")
        self.editor.move_cursor_rightest()
        self.machine.handle("tab")
        self.assertEqual(self.focus.current, FOCUS_USERNAME)
        self.assertEqual(self.editor.cursor, 0)

    def test_tab_wraps_from_login(self) -> None:
        self.focus.set(FOCUS_LOGIN)
        self.machine.handle("tab")
        self.assertEqual(self.focus.current, FOCUS_SERVER)

    def test_signals(self) -> None:
        self.assertEqual(self.machine.handle(("char", "q")), SIGNAL_QUIT)
        self.assertEqual(self.machine.handle("enter"), SIGNAL_ACTIVATE)
        self.assertEqual(self.machine.mode, COMMAND)

    def test_navigation_before_any_render_is_a_no_op(self) -> None:
        machine = InputMachine(self.focus, self.editor, GeometryRegistry())
        for key in ("up", "down", "left", "right", "tab"):
            machine.handle(key)
        self.assertEqual(self.focus.current, FOCUS_SERVER)

    def test_unmapped_pairs_are_ignored(self) -> None:
        ignored = [
            (COMMAND, ("char", "x")),
            (COMMAND, "backspace"),
            (COMMAND, "clear"),
            (COMMAND, "escape"),
            (EDITING, "tab"),
            (EDITING, "up"),
            (EDITING, "down"),
            (EDITING, None),
        ]
        for mode, key in ignored:
            self.machine.mode = mode
            self.editor.set_value(FOCUS_SERVER, "keep")
            self.editor.cursor = 2
            self.assertIsNone(lookup_action(mode, key))
            self.assertIsNone(self.machine.handle(key))
            self.assertEqual(self.machine.mode, mode)
            self.assertEqual(self.focus.current, FOCUS_SERVER)
            self.assertEqual(self.editor.value(FOCUS_SERVER), "keep")
            self.assertEqual(self.editor.cursor, 2)

    def test_every_table_entry_is_handled(self) -> None:
        samples = {"char": ("char", "a"), "q": ("char", "q"), "i": ("char", "i")}
        for (mode, key), action in DISPATCH.items():
            symbol = samples.get(key, key)
            self.assertEqual(lookup_action(mode, symbol), action, (mode, key))


if __name__ == "__main__":
    unittest.main()
