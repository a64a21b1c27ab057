"""What each command palette entry does when activated."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from kanban_tui.core.dates import DateTimeFormat
from kanban_tui.core.enums import CardPriority, CardStatus, PopUp, View
from kanban_tui.errors import ForbiddenError
from kanban_tui.widgets.palette import PaletteCommand

if TYPE_CHECKING:
    from kanban_tui.controller import Controller

logger = logging.getLogger(__name__)


def _require_board_view(controller: Controller, message: str) -> None:
    if not controller.ui.view.is_board_view:
        raise ForbiddenError(message)


def activate(controller: Controller, command: PaletteCommand) -> None:
    """Run `command` against `controller`; precondition failures raise ForbiddenError."""
    logger.info("Running command %s", command.value)
    ui = controller.ui
    match command:
        case PaletteCommand.QUIT:
            controller.request_quit()
        case PaletteCommand.CONFIG_MENU:
            controller.show_view(View.CONFIG_MENU)
        case PaletteCommand.MAIN_MENU:
            controller.show_view(View.MAIN_MENU)
        case PaletteCommand.HELP_MENU:
            controller.show_view(View.HELP_MENU)
        case PaletteCommand.SAVE_KANBAN_STATE:
            controller.save_state()
        case PaletteCommand.NEW_BOARD:
            _require_board_view(controller, "Cannot create a new board in this view")
            if ui.filter_tags:
                raise ForbiddenError("Cannot create a new board while a filter is active")
            controller.start_new_board()
        case PaletteCommand.NEW_CARD:
            _require_board_view(controller, "Cannot create a new card in this view")
            if ui.filter_tags:
                raise ForbiddenError("Cannot create a new card while a filter is active")
            if ui.current_board_id is None:
                raise ForbiddenError("No board available to add card to")
            controller.start_new_card()
        case PaletteCommand.RESET_UI:
            controller.reset_ui()
        case PaletteCommand.CHANGE_UI_MODE:
            views = View.board_views()
            index = views.index(ui.view) if ui.view in views else 0
            controller.open_selector(PopUp.CHANGE_UI_MODE, index)
        case PaletteCommand.CHANGE_CURRENT_CARD_STATUS:
            card = controller.current_card()
            if card is None or not ui.view.is_board_view:
                raise ForbiddenError("No card selected")
            controller.open_selector(
                PopUp.CARD_STATUS_SELECTOR, tuple(CardStatus).index(card.status)
            )
        case PaletteCommand.CHANGE_CURRENT_CARD_PRIORITY:
            card = controller.current_card()
            if card is None or not ui.view.is_board_view:
                raise ForbiddenError("No card selected")
            controller.open_selector(
                PopUp.CARD_PRIORITY_SELECTOR, tuple(CardPriority).index(card.priority)
            )
        case PaletteCommand.CHANGE_DATE_FORMAT:
            controller.open_selector(
                PopUp.CHANGE_DATE_FORMAT, tuple(DateTimeFormat).index(controller.config.date_format)
            )
        case PaletteCommand.CHANGE_THEME:
            controller.open_theme_selector()
        case PaletteCommand.CREATE_A_THEME:
            controller.start_theme_creation()
        case PaletteCommand.FILTER_BY_TAG:
            _require_board_view(controller, "Cannot filter by tag in this view")
            controller.open_filter()
        case PaletteCommand.CLEAR_FILTER:
            if not ui.filter_tags:
                raise ForbiddenError("No filter is active")
            controller.clear_filter()
        case PaletteCommand.DEBUG_MENU:
            controller.debug_panel = not controller.debug_panel
            logger.info("Debug panel %s", "shown" if controller.debug_panel else "hidden")
        case PaletteCommand.LOAD_A_SAVE_LOCAL:
            controller.show_view(View.LOAD_LOCAL_SAVE)
        case PaletteCommand.LOAD_A_SAVE_CLOUD:
            if controller.session is None:
                raise ForbiddenError("Not logged in")
            controller.show_view(View.LOAD_CLOUD_SAVE)
        case PaletteCommand.SYNC_LOCAL_DATA:
            controller.sync_local_data()
        case PaletteCommand.LOGIN:
            if controller.session is not None:
                raise ForbiddenError("Already logged in")
            controller.show_view(View.LOGIN)
        case PaletteCommand.SIGN_UP:
            if controller.session is not None:
                raise ForbiddenError("Already logged in")
            controller.show_view(View.SIGN_UP)
        case PaletteCommand.RESET_PASSWORD:
            controller.show_view(View.RESET_PASSWORD)
        case PaletteCommand.LOGOUT:
            controller.logout()
