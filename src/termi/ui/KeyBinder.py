# termi/ui/KeyBinder.py
"""KeyBinder.py
==================
The KeyBinder class translates terminal input into termi editor actions.

Key Features:
- Loads the default keybindings and applies user overrides from the `[keybindings]` config table.
- Decodes key specifications ("ctrl+s", "alt+d", "shift+tab", integers) into curses key codes or
  logical key names.
- Reads keys with `get_wch`, so multi-byte characters arrive whole, and resolves ESC sequences and
  modified arrow keys reported as extended curses codes.
- Dispatches each key to the handler of the current input mode (normal, search, go-to-line,
  autocomplete) and translates mouse events for the editor.

Every handler returns True when the key changed something that must be redrawn.
"""

import curses
import logging
import re
from typing import TYPE_CHECKING, Any, Callable, Optional

from wcwidth import wcswidth

from termi.core.Modes import AutocompleteMode, GoToLineMode, NormalMode, SearchMode

if TYPE_CHECKING:
    from termi.core.Editor import Editor


key_logger = logging.getLogger("termi.keyevents")

ESC = 27
ENTER_KEYS = (10, 13, curses.KEY_ENTER)
BACKSPACE_KEYS = (curses.KEY_BACKSPACE, 8, 127)
TAB = 9

# Modified keys that have no fixed curses code; they travel as these names.
LOGICAL_KEYS = frozenset(
    {
        "ctrl+left", "ctrl+right", "ctrl+up", "ctrl+down",
        "ctrl+shift+left", "ctrl+shift+right",
        "ctrl+delete", "ctrl+home", "ctrl+end",
    }
)


# ==================== KeyBinder Class ====================
class KeyBinder:
    """Class KeyBinder
    ====================
    Attributes:
        editor (Editor): The editor whose actions are triggered.
        config: Editor configuration, including user keybindings.
        stdscr: The curses window keys are read from.
        keybindings (dict): Action name -> list of key codes or logical key names.
        action_map (dict): Key code or logical key name -> editor method.
    """

    # Keys do NOT include the leading ESC; get_key_input() reads after it.
    ESCAPE_SEQUENCE_MAP: dict[str, str] = {
        "[A": "up", "[B": "down", "[C": "right", "[D": "left",
        "OA": "up", "OB": "down", "OC": "right", "OD": "left",

        # xterm modifiers: ;2=Shift, ;5=Ctrl, ;6=Shift+Ctrl
        "[1;2A": "shift+up", "[1;2B": "shift+down",
        "[1;2C": "shift+right", "[1;2D": "shift+left",
        "[1;5A": "ctrl+up", "[1;5B": "ctrl+down",
        "[1;5C": "ctrl+right", "[1;5D": "ctrl+left",
        "[1;6C": "ctrl+shift+right", "[1;6D": "ctrl+shift+left",
        "[1;2H": "shift+home", "[1;2F": "shift+end",
        "[1;5H": "ctrl+home", "[1;5F": "ctrl+end",

        "[H": "home", "[F": "end", "OH": "home", "OF": "end",
        "[1~": "home", "[4~": "end", "[7~": "home", "[8~": "end",
        "[2~": "insert", "[3~": "delete", "[3;5~": "ctrl+delete",
        "[5~": "pageup", "[6~": "pagedown",
        "[Z": "shift+tab",

        "OP": "f1", "OQ": "f2", "OR": "f3", "OS": "f4",
        "[11~": "f1", "[12~": "f2", "[13~": "f3", "[14~": "f4",
    }

    # ncurses key names of extended codes for modified keys (they vary between terminfo entries).
    KEYNAME_MAP: dict[str, str] = {
        "kLFT5": "ctrl+left", "kRIT5": "ctrl+right",
        "kUP5": "ctrl+up", "kDN5": "ctrl+down",
        "kLFT6": "ctrl+shift+left", "kRIT6": "ctrl+shift+right",
        "kDC5": "ctrl+delete", "kHOM5": "ctrl+home", "kEND5": "ctrl+end",
    }

    def __init__(self, editor: "Editor"):
        logging.debug("KeyBinder initialized with editor: %s", editor)
        self.editor = editor
        self.config = editor.config
        self.stdscr = editor.stdscr

        self.keybindings = self._load_keybindings()
        self.action_map = self._setup_action_map()
        self._mode_handlers: dict[type, Callable[[Any], bool]] = {
            NormalMode: self._handle_normal_key,
            SearchMode: self._handle_search_key,
            GoToLineMode: self._handle_goto_line_key,
            AutocompleteMode: self._handle_autocomplete_key,
        }

    # ---------------------- Handle Input --------------------
    def handle_input(self, key: str | int) -> bool:
        """Processes one key event in the current input mode.

        Args:
            key: A curses key code, a logical key name ("alt-d", "ctrl+left") or a character.

        Returns:
            bool: True if the input caused a visual change in the editor.
        """
        key_logger.debug("key %r (%s) in %s", key, type(key).__name__, type(self.editor.mode).__name__)
        original_status = self.editor.status_message
        handler = self._mode_handlers[type(self.editor.mode)]
        changed = bool(handler(key))
        return changed or self.editor.status_message != original_status

    def _handle_printable_character(self, key: str | int) -> bool:
        """Inserts a printable character; anything else is left to the caller."""
        char = self._printable(key)
        if not char:
            return False
        return self.editor.insert_char(char)

    @staticmethod
    def _printable(key: str | int) -> str:
        if isinstance(key, str) and len(key) == 1 and wcswidth(key) > 0:
            return key
        return ""

    def _handle_normal_key(self, key: str | int) -> bool:
        mode = self.editor.mode
        if isinstance(mode, NormalMode) and mode.quit_pending and self.lookup(key) != "quit":
            self.editor.cancel_quit()

        if key in self.action_map:
            action = self.action_map[key]
            logging.debug(f"handle_input: Key '{key}' found in action_map. Calling: {action.__name__}")
            return bool(action())
        if self._handle_printable_character(key):
            return True

        logging.debug("Unhandled input: %r (type: %s)", key, type(key).__name__)
        self.editor._set_status_message(f"Ignored unhandled input: {key!r}")
        return True

    def _handle_search_key(self, key: str | int) -> bool:
        editor = self.editor
        if key == ESC:
            return editor.cancel_search()
        if key in ENTER_KEYS:
            return editor.search_refresh()
        if key in (TAB, curses.KEY_F3):
            return editor.search_next()
        if key in BACKSPACE_KEYS:
            return editor.search_backspace()
        char = self._printable(key)
        if char:
            return editor.search_append(char)
        return False

    def _handle_goto_line_key(self, key: str | int) -> bool:
        editor = self.editor
        if key == ESC:
            return editor.cancel_goto_line()
        if key in ENTER_KEYS:
            return editor.confirm_goto_line()
        if key in BACKSPACE_KEYS:
            return editor.goto_line_backspace()
        char = self._printable(key)
        if char:
            return editor.goto_line_input(char)
        return False

    def _handle_autocomplete_key(self, key: str | int) -> bool:
        editor = self.editor
        if key == curses.KEY_UP:
            return editor.autocomplete_prev()
        if key == curses.KEY_DOWN:
            return editor.autocomplete_next()
        if key in ENTER_KEYS or key == TAB:
            return editor.apply_autocomplete()

        char = self._printable(key)
        if char:
            editor.cancel_autocomplete()
            editor.insert_char(char)
            editor.start_autocomplete()
            return True
        if key in BACKSPACE_KEYS:
            editor.cancel_autocomplete()
            editor.handle_backspace()
            editor.start_autocomplete()
            return True
        return editor.cancel_autocomplete()

    # ---------------------- Mouse --------------------
    def handle_mouse(self) -> bool:
        """Reads the pending mouse event and forwards it to the editor."""
        try:
            _id, x, y, _z, bstate = curses.getmouse()
        except curses.error:
            return False
        key_logger.debug("mouse x=%d y=%d bstate=%#x", x, y, bstate)

        editor = self.editor
        if bstate & curses.BUTTON4_PRESSED:
            return editor.handle_mouse_wheel(up=True)
        if bstate & getattr(curses, "BUTTON5_PRESSED", 0):
            return editor.handle_mouse_wheel(up=False)
        if bstate & curses.BUTTON1_PRESSED:
            return editor.handle_mouse_press(y, x, shift=bool(bstate & curses.BUTTON_SHIFT))
        if bstate & curses.BUTTON1_RELEASED:
            moved = editor.handle_mouse_drag(y, x)
            editor.handle_mouse_release()
            return moved
        if bstate & curses.BUTTON1_CLICKED:
            changed = editor.handle_mouse_press(y, x, shift=bool(bstate & curses.BUTTON_SHIFT))
            editor.handle_mouse_release()
            return changed
        if bstate & curses.REPORT_MOUSE_POSITION:
            return editor.handle_mouse_drag(y, x)
        return False

    # ---------------------- Keybindings --------------------
    def _load_keybindings(self) -> dict[str, list[int | str]]:
        """Builds action name -> key codes from the defaults and the user's `[keybindings]`.

        A user value replaces the default list for that action; it can be a list, a single spec
        or "spec|spec". An empty value unbinds the action.
        """
        default_keybindings: dict[str, list[int | str]] = {
            "save_file": ["ctrl+s"],
            "quit": ["ctrl+q"],
            "undo": ["ctrl+z", getattr(curses, "KEY_SUSPEND", 407)],
            "redo": ["ctrl+y"],
            "select_all": ["ctrl+a"],
            "copy": ["ctrl+c"],
            "cut": ["ctrl+x"],
            "paste": ["ctrl+v"],
            "find": ["ctrl+f"],
            "goto_line": ["ctrl+g"],
            "autocomplete": ["ctrl+space", "ctrl+n"],
            "delete_word_backward": ["ctrl+w"],
            "delete_word_forward": ["alt+d", "ctrl+delete"],
            "handle_backspace": ["backspace", *BACKSPACE_KEYS],
            "handle_delete": ["delete"],
            "handle_enter": ["enter", 10, 13],
            "tab": ["tab"],
            "shift_tab": ["shift+tab"],
            "handle_left": ["left"],
            "handle_right": ["right"],
            "handle_up": ["up"],
            "handle_down": ["down"],
            "word_left": ["ctrl+left", "alt+b"],
            "word_right": ["ctrl+right", "alt+f"],
            "extend_word_left": ["ctrl+shift+left"],
            "extend_word_right": ["ctrl+shift+right"],
            "extend_selection_up": ["shift+up"],
            "extend_selection_down": ["shift+down"],
            "extend_selection_left": ["shift+left"],
            "extend_selection_right": ["shift+right"],
            "handle_home": ["home"],
            "handle_end": ["end"],
            "select_to_home": ["shift+home"],
            "select_to_end": ["shift+end"],
            "handle_page_up": ["pageup"],
            "handle_page_down": ["pagedown"],
        }

        user_keybindings_config: dict[str, object] = self.config.get("keybindings", {}) or {}
        parsed_keybindings: dict[str, list[int | str]] = {}

        for action, default_value_spec in default_keybindings.items():
            value_spec: object = user_keybindings_config.get(action, default_value_spec)
            if not value_spec and value_spec != 0:
                logging.debug("Keybinding for action %r is disabled or empty.", action)
                continue

            specs_to_process: list[Any]
            if isinstance(value_spec, list):
                specs_to_process = value_spec
            elif isinstance(value_spec, str) and "|" in value_spec:
                specs_to_process = [s.strip() for s in value_spec.split("|")]
            else:
                specs_to_process = [value_spec]

            key_codes_for_action: list[int | str] = []
            for key_spec_item in specs_to_process:
                try:
                    key_code = self._decode_keystring(key_spec_item)
                except ValueError as e:
                    logging.error(
                        "Error parsing keybinding item %r for action %r: %s. This binding is ignored.",
                        key_spec_item, action, e,
                    )
                    continue
                if key_code not in key_codes_for_action:
                    key_codes_for_action.append(key_code)

            if key_codes_for_action:
                parsed_keybindings[action] = key_codes_for_action
            else:
                logging.warning("No valid key codes found for action %r. It will not be bound.", action)

        unknown = set(user_keybindings_config) - set(default_keybindings)
        if unknown:
            logging.warning(f"Unknown actions in [keybindings] ignored: {sorted(unknown)}")

        logging.debug("Loaded keybindings (action -> key codes): %s", parsed_keybindings)
        return parsed_keybindings

    def _decode_keystring(self, key_input: str | int) -> int | str:
        """Decodes a key specification into a curses key code or a logical key name.

        Args:
            key_input: "ctrl+s", "alt+d", "shift+tab", "f3", "ctrl+left", a single character
                or an integer key code.

        Returns:
            int | str: The key code, "alt-<key>" for Alt chords, or a name from LOGICAL_KEYS.

        Raises:
            ValueError: If the specification is empty or uses an unknown key or modifier.
        """
        if isinstance(key_input, bool) or not isinstance(key_input, (str, int)):
            raise ValueError(f"Invalid key_input type: {type(key_input)}. Expected str or int.")
        if isinstance(key_input, int):
            return key_input

        s = key_input.strip().lower()
        if not s:
            raise ValueError("Key string cannot be empty.")

        parts = [p.strip() for p in s.split("+")] if len(s) > 1 else [s]
        base_key_str = parts[-1]
        modifiers = sorted(set(parts[:-1]))

        if "alt" in modifiers:
            other_mods = [m for m in modifiers if m != "alt"]
            prefix = "+".join(other_mods) + "+" if other_mods else ""
            return f"alt-{prefix}{base_key_str}"
        if s.startswith("alt-"):
            return s

        canonical = "+".join([*modifiers, base_key_str])
        if canonical in LOGICAL_KEYS:
            return canonical

        named_keys_map: dict[str, int] = {
            "left": curses.KEY_LEFT,
            "right": curses.KEY_RIGHT,
            "up": curses.KEY_UP,
            "down": curses.KEY_DOWN,
            "home": curses.KEY_HOME,
            "end": getattr(curses, "KEY_END", curses.KEY_LL),
            "pageup": curses.KEY_PPAGE,
            "pgup": curses.KEY_PPAGE,
            "pagedown": curses.KEY_NPAGE,
            "pgdn": curses.KEY_NPAGE,
            "delete": curses.KEY_DC,
            "del": curses.KEY_DC,
            "backspace": curses.KEY_BACKSPACE,
            "insert": curses.KEY_IC,
            "tab": TAB,
            "enter": curses.KEY_ENTER,
            "return": curses.KEY_ENTER,
            "space": ord(" "),
            "esc": ESC,
            "escape": ESC,
            "shift+left": curses.KEY_SLEFT,
            "shift+right": curses.KEY_SRIGHT,
            "shift+up": getattr(curses, "KEY_SR", 337),
            "shift+down": getattr(curses, "KEY_SF", 336),
            "shift+home": curses.KEY_SHOME,
            "shift+end": curses.KEY_SEND,
            "shift+tab": getattr(curses, "KEY_BTAB", 353),
            "ctrl+space": 0,
        }
        named_keys_map.update({f"f{i}": getattr(curses, f"KEY_F{i}", 264 + i) for i in range(1, 13)})

        if canonical in named_keys_map:
            return named_keys_map[canonical]

        if base_key_str in named_keys_map:
            base_code = named_keys_map[base_key_str]
        elif len(base_key_str) == 1:
            base_code = ord(base_key_str)
        else:
            raise ValueError(f"Unknown base key '{base_key_str}' in '{key_input}'")

        remaining = set(modifiers)
        if "ctrl" in remaining:
            remaining.discard("ctrl")
            if len(base_key_str) == 1 and "a" <= base_key_str <= "z":
                base_code = ord(base_key_str) - ord("a") + 1
            elif base_key_str in ("[", "\\", "]"):
                base_code = ord(base_key_str) - 64
            else:
                raise ValueError(f"Ctrl combination not representable: '{key_input}'")
        if "shift" in remaining:
            remaining.discard("shift")
            if len(base_key_str) == 1 and base_key_str.isalpha():
                base_code = ord(base_key_str.upper())

        if remaining:
            raise ValueError(f"Unknown or unhandled modifiers {sorted(remaining)} in '{key_input}'")
        return base_code

    def _setup_action_map(self) -> dict[int | str, Callable[..., Any]]:
        """Maps every bound key code to the editor method of its action."""
        editor = self.editor
        action_to_method_map: dict[str, Callable[..., Any]] = {
            "save_file": editor.save_file,
            "quit": editor.request_quit,
            "undo": editor.undo,
            "redo": editor.redo,
            "select_all": editor.select_all,
            "copy": editor.copy,
            "cut": editor.cut,
            "paste": editor.paste,
            "find": editor.start_search,
            "goto_line": editor.start_goto_line,
            "autocomplete": editor.start_autocomplete,
            "delete_word_backward": editor.delete_word_backward,
            "delete_word_forward": editor.delete_word_forward,
            "handle_backspace": editor.handle_backspace,
            "handle_delete": editor.handle_delete,
            "handle_enter": editor.handle_enter,
            "tab": editor.handle_tab,
            "shift_tab": editor.handle_unindent,
            "handle_left": editor.move_left,
            "handle_right": editor.move_right,
            "handle_up": editor.move_up,
            "handle_down": editor.move_down,
            "word_left": editor.word_left,
            "word_right": editor.word_right,
            "extend_word_left": editor.extend_word_left,
            "extend_word_right": editor.extend_word_right,
            "extend_selection_up": editor.extend_selection_up,
            "extend_selection_down": editor.extend_selection_down,
            "extend_selection_left": editor.extend_selection_left,
            "extend_selection_right": editor.extend_selection_right,
            "handle_home": editor.handle_home,
            "handle_end": editor.handle_end,
            "select_to_home": editor.select_to_home,
            "select_to_end": editor.select_to_end,
            "handle_page_up": editor.handle_page_up,
            "handle_page_down": editor.handle_page_down,
        }

        final_key_action_map: dict[int | str, Callable[..., Any]] = {}
        for action_name, key_code_list in self.keybindings.items():
            method_callable = action_to_method_map[action_name]
            for key_code in key_code_list:
                existing = final_key_action_map.get(key_code)
                if existing is not None and existing.__name__ != method_callable.__name__:
                    logging.warning(
                        f"Keybinding for action '{action_name}' (key: {key_code}) is overwriting "
                        f"an existing mapping for method '{existing.__name__}'."
                    )
                final_key_action_map[key_code] = method_callable

        final_map_log_str = {k: v.__name__ for k, v in final_key_action_map.items()}
        logging.debug(f"Final constructed action map: {final_map_log_str}")
        return final_key_action_map

    # ---------------------- Reading keys --------------------
    def _logical_name_for_code(self, code: int) -> int | str:
        """Translates extended curses codes of modified keys into logical key names."""
        try:
            name = curses.keyname(code).decode("ascii", "replace")
        except (curses.error, ValueError):
            return code
        return self.KEYNAME_MAP.get(name, code)

    def get_key_input(self, window: Optional[Any] = None) -> int | str:
        """Reads one key or key sequence from the terminal.

        Returns:
            int | str:
            - a curses key code or control-character code (int),
            - a single printable character (str),
            - "alt-<char>" for Alt/Meta chords, or a logical key name for modified keys,
            - 27 for a lone ESC,
            - curses.ERR when no input arrived before the timeout.
        """
        target = window or self.stdscr
        try:
            ch = target.get_wch()
        except curses.error:
            return curses.ERR

        if isinstance(ch, int):
            if ch > 255:
                return self._logical_name_for_code(ch)
            return ch

        code = ord(ch)
        if code != ESC:
            return code if code < 32 or code == 127 else ch

        seq = ""
        target.nodelay(True)
        try:
            while True:
                try:
                    nx = target.get_wch()
                except curses.error:
                    break
                seq += nx if isinstance(nx, str) else f"<{nx}>"
        finally:
            target.nodelay(False)

        if not seq:
            logging.debug("get_key_input: standalone ESC")
            return ESC
        if seq[0] == "\x1b":
            seq = seq[1:]

        if len(seq) == 1 and seq.isprintable():
            return f"alt-{seq.lower()}"

        mapped = self.ESCAPE_SEQUENCE_MAP.get(seq)
        if not mapped:
            cleaned = "".join(re.findall(r"[\[O0-9;~A-Za-z]", seq))
            mapped = self.ESCAPE_SEQUENCE_MAP.get(cleaned)
        if mapped:
            code_or_name = self._decode_keystring(mapped)
            logging.debug("get_key_input: ESC %r -> %r -> %r", seq, mapped, code_or_name)
            return code_or_name

        logging.warning("get_key_input: unknown escape sequence: ESC + %r", seq)
        return ESC

    def lookup(self, key_spec: str | int) -> Optional[str]:
        """Finds the action name bound to a key specification, or None."""
        try:
            decoded_key = self._decode_keystring(key_spec)
        except ValueError:
            return None
        for action_name, key_list in self.keybindings.items():
            if decoded_key in key_list:
                return action_name
        return None
