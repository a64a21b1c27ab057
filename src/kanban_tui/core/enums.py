"""Closed enumerations shared by the model, the state machine and the renderer."""

from __future__ import annotations

from enum import StrEnum


class CardStatus(StrEnum):
    """Card lifecycle status."""

    ACTIVE = "Active"
    COMPLETE = "Complete"
    STALE = "Stale"


class CardPriority(StrEnum):
    """Card priority levels."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class InputStatus(StrEnum):
    """Input mode of the application."""

    INIT = "Init"
    INITIALIZED = "Initialized"
    USER_INPUT = "UserInput"
    KEY_BIND_MODE = "KeyBindMode"


class ToastKind(StrEnum):
    ERROR = "Error"
    INFO = "Info"
    LOADING = "Loading"
    WARNING = "Warning"

    @property
    def title(self) -> str:
        return self.value


class CalendarFormat(StrEnum):
    """First day of the week in the date picker."""

    SUNDAY_FIRST = "SundayFirst"
    MONDAY_FIRST = "MondayFirst"


class Focus(StrEnum):
    """Keyboard-focusable elements across every view and popup."""

    NO_FOCUS = "NoFocus"
    TITLE = "Title"
    BODY = "Body"
    HELP = "Help"
    LOG = "Log"
    CONFIG_TABLE = "ConfigTable"
    MAIN_MENU = "MainMenu"
    MAIN_MENU_HELP = "MainMenuHelp"
    NEW_BOARD_NAME = "NewBoardName"
    NEW_BOARD_DESCRIPTION = "NewBoardDescription"
    NEW_CARD_NAME = "NewCardName"
    NEW_CARD_DESCRIPTION = "NewCardDescription"
    NEW_CARD_DUE_DATE = "NewCardDueDate"
    SUBMIT_BUTTON = "SubmitButton"
    EXTRA_FOCUS = "ExtraFocus"
    CARD_NAME = "CardName"
    CARD_DESCRIPTION = "CardDescription"
    CARD_DUE_DATE = "CardDueDate"
    CARD_PRIORITY = "CardPriority"
    CARD_STATUS = "CardStatus"
    CARD_TAGS = "CardTags"
    CARD_COMMENTS = "CardComments"
    COMMAND_PALETTE_COMMAND = "CommandPaletteCommand"
    COMMAND_PALETTE_CARD = "CommandPaletteCard"
    COMMAND_PALETTE_BOARD = "CommandPaletteBoard"
    EDIT_GENERAL_CONFIG = "EditGeneralConfig"
    EDIT_KEYBINDINGS_TABLE = "EditKeybindingsTable"
    LOAD_SAVE = "LoadSave"
    EMAIL_ID_FIELD = "EmailIDField"
    PASSWORD_FIELD = "PasswordField"
    CONFIRM_PASSWORD_FIELD = "ConfirmPasswordField"
    SHOW_HIDE_PASSWORD = "ShowHidePassword"
    SEND_RESET_PASSWORD_LINK = "SendResetPasswordLink"
    RESET_PASSWORD_LINK_FIELD = "ResetPasswordLinkField"
    THEME_NAME = "ThemeName"
    THEME_EDITOR = "ThemeEditor"
    STYLE_EDITOR_FG = "StyleEditorFG"
    STYLE_EDITOR_BG = "StyleEditorBG"
    STYLE_EDITOR_MODIFIER = "StyleEditorModifier"
    TEXT_INPUT = "TextInput"
    FILTER_BY_TAG = "FilterByTag"
    DTP_CALENDAR = "DTPCalender"
    DTP_MONTH = "DTPMonth"
    DTP_YEAR = "DTPYear"
    DTP_TOGGLE_TIME_PICKER = "DTPToggleTimePicker"
    DTP_HOUR = "DTPHour"
    DTP_MINUTE = "DTPMinute"
    DTP_SECOND = "DTPSecond"

    @property
    def is_text_input(self) -> bool:
        return self in TEXT_INPUT_FOCUSES

    @property
    def is_single_line(self) -> bool:
        return self in TEXT_INPUT_FOCUSES and self not in MULTI_LINE_FOCUSES

    def next_in(self, targets: tuple[Focus, ...]) -> Focus:
        """Next focus in `targets` with wraparound; first target when not a member."""
        if not targets:
            return self
        if self not in targets:
            return targets[0]
        return targets[(targets.index(self) + 1) % len(targets)]

    def prev_in(self, targets: tuple[Focus, ...]) -> Focus:
        """Previous focus in `targets` with wraparound; last target when not a member."""
        if not targets:
            return self
        if self not in targets:
            return targets[-1]
        return targets[(targets.index(self) - 1) % len(targets)]


TEXT_INPUT_FOCUSES: frozenset[Focus] = frozenset(
    {
        Focus.NEW_BOARD_NAME,
        Focus.NEW_BOARD_DESCRIPTION,
        Focus.NEW_CARD_NAME,
        Focus.NEW_CARD_DESCRIPTION,
        Focus.CARD_NAME,
        Focus.CARD_DESCRIPTION,
        Focus.CARD_TAGS,
        Focus.CARD_COMMENTS,
        Focus.COMMAND_PALETTE_COMMAND,
        Focus.COMMAND_PALETTE_CARD,
        Focus.COMMAND_PALETTE_BOARD,
        Focus.EDIT_GENERAL_CONFIG,
        Focus.EMAIL_ID_FIELD,
        Focus.PASSWORD_FIELD,
        Focus.CONFIRM_PASSWORD_FIELD,
        Focus.RESET_PASSWORD_LINK_FIELD,
        Focus.TEXT_INPUT,
        Focus.THEME_NAME,
    }
)

MULTI_LINE_FOCUSES: frozenset[Focus] = frozenset(
    {
        Focus.NEW_BOARD_DESCRIPTION,
        Focus.NEW_CARD_DESCRIPTION,
        Focus.CARD_DESCRIPTION,
        Focus.CARD_COMMENTS,
    }
)

PALETTE_FOCUSES: tuple[Focus, ...] = (
    Focus.COMMAND_PALETTE_COMMAND,
    Focus.COMMAND_PALETTE_CARD,
    Focus.COMMAND_PALETTE_BOARD,
)

DATE_PICKER_FOCUSES: tuple[Focus, ...] = (
    Focus.DTP_CALENDAR,
    Focus.DTP_MONTH,
    Focus.DTP_YEAR,
    Focus.DTP_TOGGLE_TIME_PICKER,
    Focus.DTP_HOUR,
    Focus.DTP_MINUTE,
    Focus.DTP_SECOND,
)

TIME_PICKER_FOCUSES: frozenset[Focus] = frozenset(
    {Focus.DTP_HOUR, Focus.DTP_MINUTE, Focus.DTP_SECOND}
)


class View(StrEnum):
    """Top-level layouts."""

    ZEN = "Zen"
    TITLE_BODY = "TitleBody"
    BODY_HELP = "BodyHelp"
    BODY_LOG = "BodyLog"
    TITLE_BODY_HELP = "TitleBodyHelp"
    TITLE_BODY_LOG = "TitleBodyLog"
    BODY_HELP_LOG = "BodyHelpLog"
    TITLE_BODY_HELP_LOG = "TitleBodyHelpLog"
    CONFIG_MENU = "ConfigMenu"
    EDIT_KEYBINDINGS = "EditKeybindings"
    HELP_MENU = "HelpMenu"
    MAIN_MENU = "MainMenu"
    LOGS_ONLY = "LogsOnly"
    NEW_BOARD = "NewBoard"
    NEW_CARD = "NewCard"
    LOAD_LOCAL_SAVE = "LoadLocalSave"
    LOAD_CLOUD_SAVE = "LoadCloudSave"
    LOGIN = "Login"
    SIGN_UP = "SignUp"
    RESET_PASSWORD = "ResetPassword"
    CREATE_THEME = "CreateTheme"

    @property
    def label(self) -> str:
        return _VIEW_LABELS[self]

    @property
    def available_focus(self) -> tuple[Focus, ...]:
        return _VIEW_FOCUS[self]

    @property
    def is_board_view(self) -> bool:
        return self in _BOARD_VIEW_PARTS

    @property
    def parts(self) -> frozenset[str]:
        """Optional panels shown beside the body ("title", "help", "log")."""
        return _BOARD_VIEW_PARTS.get(self, frozenset())

    def without(self, part: str) -> View | None:
        """Board view with `part` hidden, or None when it is not shown."""
        if part not in self.parts:
            return None
        return board_view_with(self.parts - {part})

    @classmethod
    def board_views(cls) -> tuple[View, ...]:
        return tuple(_BOARD_VIEW_PARTS)


_BOARD_VIEW_PARTS: dict[View, frozenset[str]] = {
    View.ZEN: frozenset(),
    View.TITLE_BODY: frozenset({"title"}),
    View.BODY_HELP: frozenset({"help"}),
    View.BODY_LOG: frozenset({"log"}),
    View.TITLE_BODY_HELP: frozenset({"title", "help"}),
    View.TITLE_BODY_LOG: frozenset({"title", "log"}),
    View.BODY_HELP_LOG: frozenset({"help", "log"}),
    View.TITLE_BODY_HELP_LOG: frozenset({"title", "help", "log"}),
}


def board_view_with(parts: frozenset[str]) -> View:
    for view, view_parts in _BOARD_VIEW_PARTS.items():
        if view_parts == parts:
            return view
    raise ValueError(f"No board view shows {sorted(parts)}")


_VIEW_LABELS: dict[View, str] = {
    View.ZEN: "Zen",
    View.TITLE_BODY: "Title and Body",
    View.BODY_HELP: "Body and Help",
    View.BODY_LOG: "Body and Log",
    View.TITLE_BODY_HELP: "Title, Body and Help",
    View.TITLE_BODY_LOG: "Title, Body and Log",
    View.BODY_HELP_LOG: "Body, Help and Log",
    View.TITLE_BODY_HELP_LOG: "Title, Body, Help and Log",
    View.CONFIG_MENU: "Config",
    View.EDIT_KEYBINDINGS: "Edit Keybindings",
    View.HELP_MENU: "Help Menu",
    View.MAIN_MENU: "Main Menu",
    View.LOGS_ONLY: "Logs Only",
    View.NEW_BOARD: "New Board",
    View.NEW_CARD: "New Card",
    View.LOAD_LOCAL_SAVE: "Load a Save (local)",
    View.LOAD_CLOUD_SAVE: "Load a Save (cloud)",
    View.LOGIN: "Login",
    View.SIGN_UP: "Sign Up",
    View.RESET_PASSWORD: "Reset Password",
    View.CREATE_THEME: "Create Theme",
}

_VIEW_FOCUS: dict[View, tuple[Focus, ...]] = {
    View.ZEN: (Focus.BODY,),
    View.TITLE_BODY: (Focus.TITLE, Focus.BODY),
    View.BODY_HELP: (Focus.BODY, Focus.HELP),
    View.BODY_LOG: (Focus.BODY, Focus.LOG),
    View.TITLE_BODY_HELP: (Focus.TITLE, Focus.BODY, Focus.HELP),
    View.TITLE_BODY_LOG: (Focus.TITLE, Focus.BODY, Focus.LOG),
    View.BODY_HELP_LOG: (Focus.BODY, Focus.HELP, Focus.LOG),
    View.TITLE_BODY_HELP_LOG: (Focus.TITLE, Focus.BODY, Focus.HELP, Focus.LOG),
    View.CONFIG_MENU: (Focus.CONFIG_TABLE, Focus.SUBMIT_BUTTON, Focus.EXTRA_FOCUS),
    View.EDIT_KEYBINDINGS: (Focus.EDIT_KEYBINDINGS_TABLE, Focus.SUBMIT_BUTTON),
    View.HELP_MENU: (Focus.HELP, Focus.LOG),
    View.MAIN_MENU: (Focus.MAIN_MENU, Focus.MAIN_MENU_HELP, Focus.LOG),
    View.LOGS_ONLY: (Focus.LOG,),
    View.NEW_BOARD: (Focus.NEW_BOARD_NAME, Focus.NEW_BOARD_DESCRIPTION, Focus.SUBMIT_BUTTON),
    View.NEW_CARD: (
        Focus.NEW_CARD_NAME,
        Focus.NEW_CARD_DESCRIPTION,
        Focus.NEW_CARD_DUE_DATE,
        Focus.SUBMIT_BUTTON,
    ),
    View.LOAD_LOCAL_SAVE: (Focus.LOAD_SAVE,),
    View.LOAD_CLOUD_SAVE: (Focus.LOAD_SAVE,),
    View.LOGIN: (
        Focus.EMAIL_ID_FIELD,
        Focus.PASSWORD_FIELD,
        Focus.SHOW_HIDE_PASSWORD,
        Focus.SUBMIT_BUTTON,
    ),
    View.SIGN_UP: (
        Focus.EMAIL_ID_FIELD,
        Focus.PASSWORD_FIELD,
        Focus.CONFIRM_PASSWORD_FIELD,
        Focus.SHOW_HIDE_PASSWORD,
        Focus.SUBMIT_BUTTON,
    ),
    View.RESET_PASSWORD: (
        Focus.EMAIL_ID_FIELD,
        Focus.SEND_RESET_PASSWORD_LINK,
        Focus.RESET_PASSWORD_LINK_FIELD,
        Focus.PASSWORD_FIELD,
        Focus.CONFIRM_PASSWORD_FIELD,
        Focus.SHOW_HIDE_PASSWORD,
        Focus.SUBMIT_BUTTON,
    ),
    View.CREATE_THEME: (
        Focus.THEME_NAME,
        Focus.THEME_EDITOR,
        Focus.SUBMIT_BUTTON,
        Focus.EXTRA_FOCUS,
    ),
}


class PopUp(StrEnum):
    """Transient modals layered over the current view."""

    VIEW_CARD = "ViewCard"
    COMMAND_PALETTE = "CommandPalette"
    EDIT_SPECIFIC_KEY_BINDING = "EditSpecificKeyBinding"
    CHANGE_UI_MODE = "ChangeUIMode"
    CARD_STATUS_SELECTOR = "CardStatusSelector"
    CARD_PRIORITY_SELECTOR = "CardPrioritySelector"
    EDIT_GENERAL_CONFIG = "EditGeneralConfig"
    SELECT_DEFAULT_VIEW = "SelectDefaultView"
    CHANGE_DATE_FORMAT = "ChangeDateFormat"
    CHANGE_THEME = "ChangeTheme"
    EDIT_THEME_STYLE = "EditThemeStyle"
    SAVE_THEME_PROMPT = "SaveThemePrompt"
    CUSTOM_HEX_COLOR_PROMPT_FG = "CustomHexColorPromptFG"
    CUSTOM_HEX_COLOR_PROMPT_BG = "CustomHexColorPromptBG"
    CONFIRM_DISCARD_CARD_CHANGES = "ConfirmDiscardCardChanges"
    FILTER_BY_TAG = "FilterByTag"
    DATE_TIME_PICKER = "DateTimePicker"

    @property
    def label(self) -> str:
        return _POPUP_LABELS[self]

    @property
    def available_focus(self) -> tuple[Focus, ...]:
        return _POPUP_FOCUS[self]


_POPUP_LABELS: dict[PopUp, str] = {
    PopUp.VIEW_CARD: "Card View",
    PopUp.COMMAND_PALETTE: "Command Palette",
    PopUp.EDIT_SPECIFIC_KEY_BINDING: "Edit Keybinding",
    PopUp.CHANGE_UI_MODE: "Change View",
    PopUp.CARD_STATUS_SELECTOR: "Change Card Status",
    PopUp.CARD_PRIORITY_SELECTOR: "Change Card Priority",
    PopUp.EDIT_GENERAL_CONFIG: "Edit Config",
    PopUp.SELECT_DEFAULT_VIEW: "Select Default View",
    PopUp.CHANGE_DATE_FORMAT: "Change Date Format",
    PopUp.CHANGE_THEME: "Change Theme",
    PopUp.EDIT_THEME_STYLE: "Edit Theme Style",
    PopUp.SAVE_THEME_PROMPT: "Save Theme",
    PopUp.CUSTOM_HEX_COLOR_PROMPT_FG: "Custom Foreground Color",
    PopUp.CUSTOM_HEX_COLOR_PROMPT_BG: "Custom Background Color",
    PopUp.CONFIRM_DISCARD_CARD_CHANGES: "Discard Card Changes",
    PopUp.FILTER_BY_TAG: "Filter By Tag",
    PopUp.DATE_TIME_PICKER: "Date Time Picker",
}

_POPUP_FOCUS: dict[PopUp, tuple[Focus, ...]] = {
    PopUp.VIEW_CARD: (
        Focus.CARD_NAME,
        Focus.CARD_DESCRIPTION,
        Focus.CARD_DUE_DATE,
        Focus.CARD_PRIORITY,
        Focus.CARD_STATUS,
        Focus.CARD_TAGS,
        Focus.CARD_COMMENTS,
        Focus.SUBMIT_BUTTON,
    ),
    PopUp.COMMAND_PALETTE: PALETTE_FOCUSES,
    PopUp.EDIT_SPECIFIC_KEY_BINDING: (),
    PopUp.CHANGE_UI_MODE: (),
    PopUp.CARD_STATUS_SELECTOR: (),
    PopUp.CARD_PRIORITY_SELECTOR: (),
    PopUp.EDIT_GENERAL_CONFIG: (Focus.EDIT_GENERAL_CONFIG, Focus.SUBMIT_BUTTON),
    PopUp.SELECT_DEFAULT_VIEW: (),
    PopUp.CHANGE_DATE_FORMAT: (),
    PopUp.CHANGE_THEME: (),
    PopUp.EDIT_THEME_STYLE: (
        Focus.STYLE_EDITOR_FG,
        Focus.STYLE_EDITOR_BG,
        Focus.STYLE_EDITOR_MODIFIER,
        Focus.SUBMIT_BUTTON,
    ),
    PopUp.SAVE_THEME_PROMPT: (Focus.SUBMIT_BUTTON, Focus.EXTRA_FOCUS),
    PopUp.CUSTOM_HEX_COLOR_PROMPT_FG: (Focus.TEXT_INPUT, Focus.SUBMIT_BUTTON),
    PopUp.CUSTOM_HEX_COLOR_PROMPT_BG: (Focus.TEXT_INPUT, Focus.SUBMIT_BUTTON),
    PopUp.CONFIRM_DISCARD_CARD_CHANGES: (Focus.SUBMIT_BUTTON, Focus.EXTRA_FOCUS),
    PopUp.FILTER_BY_TAG: (Focus.FILTER_BY_TAG, Focus.SUBMIT_BUTTON),
    PopUp.DATE_TIME_PICKER: DATE_PICKER_FOCUSES,
}


class MainMenuItem(StrEnum):
    VIEW_BOARDS = "View your Boards"
    CONFIGURE = "Configure"
    HELP = "Help"
    LOAD_SAVE_LOCAL = "Load a Save (local)"
    LOAD_SAVE_CLOUD = "Load a Save (cloud)"
    QUIT = "Quit"

    @classmethod
    def available(cls, logged_in: bool) -> tuple[MainMenuItem, ...]:
        items = tuple(cls)
        if logged_in:
            return items
        return tuple(item for item in items if item is not cls.LOAD_SAVE_CLOUD)


class NavigationDirection(StrEnum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
