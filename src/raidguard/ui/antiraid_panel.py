"""
Interactive anti-raid configuration panel.

One :class:`AntiRaidPanelView` is created per ``/antiraid`` invocation. It
renders five toggle buttons, accepts presses from the invoking owner only,
and closes itself after its timeout. Pressing Anti-Fake opens
:class:`AntiFakeModal` to collect the minimum account age.

Panel lifecycle::

    OPEN --Anti-Fake--> AWAITING_DIALOG --submit--> OPEN
      \\                                            /
       '------------------ timeout ----------------'--> CLOSED
"""

import enum
from typing import Optional

import discord

from raidguard.configuration.guild_settings import GuildSettingsManager
from raidguard.datatypes.protection_datatypes import (
    ANTI_FAKE_MODAL_ACTION,
    GuildProtectionConfig,
    ProtectionToggle,
    decode_custom_id,
    encode_custom_id,
    parse_min_days,
)
from raidguard.util.discord_utils import send_ephemeral_error
from raidguard.util.logger import get_logger

logger = get_logger("antiraid_panel")

PANEL_TITLE = "Anti-Raid Protection"
PANEL_DESCRIPTION = "Configure the anti-raid options for your server."
PANEL_CLOSED_DESCRIPTION = "Anti-raid settings closed."
PANEL_COLOR = discord.Color(0x4C89C7)

NOT_INVOKER_MESSAGE = "Only the command issuer can use these buttons."
INVALID_DAYS_MESSAGE = "Please enter a valid positive number of days."
BUTTON_ERROR_MESSAGE = "An error occurred while processing the button."
MODAL_ERROR_MESSAGE = "An error occurred while processing the modal."

# Three controls on the first row, two on the second
PANEL_LAYOUT: tuple[tuple[ProtectionToggle, ...], ...] = (
    (ProtectionToggle.ANTI_BOT, ProtectionToggle.ANTI_FAKE, ProtectionToggle.CHANNEL_DELETE),
    (ProtectionToggle.CHANNEL_CREATE, ProtectionToggle.ROLE_DELETE),
)

TOGGLE_LABELS: dict[ProtectionToggle, str] = {
    ProtectionToggle.ANTI_BOT: "Anti-Bot",
    ProtectionToggle.ANTI_FAKE: "Anti-Fake",
    ProtectionToggle.CHANNEL_DELETE: "Channel Delete",
    ProtectionToggle.CHANNEL_CREATE: "Channel Create",
    ProtectionToggle.ROLE_DELETE: "Role Delete",
}


class PanelState(enum.Enum):
    OPEN = "open"
    AWAITING_DIALOG = "awaiting_dialog"
    CLOSED = "closed"


def build_panel_embed(*, closed: bool = False) -> discord.Embed:
    return discord.Embed(
        title=PANEL_TITLE,
        description=PANEL_CLOSED_DESCRIPTION if closed else PANEL_DESCRIPTION,
        color=PANEL_COLOR,
    )


def toggle_label(config: GuildProtectionConfig, toggle: ProtectionToggle) -> str:
    """Button label reflecting the toggle's current state."""
    name = TOGGLE_LABELS[toggle]
    if not config.is_enabled(toggle):
        return f"{name}: OFF"
    if toggle is ProtectionToggle.ANTI_FAKE:
        return f"{name}: ON ({config.anti_fake.min_days} days)"
    return f"{name}: ON"


def toggle_style(enabled: bool) -> discord.ButtonStyle:
    return discord.ButtonStyle.success if enabled else discord.ButtonStyle.danger


class ProtectionButton(discord.ui.Button):
    """One panel control; its custom id is ``<action>_<guildId>``."""

    def __init__(self, toggle: ProtectionToggle, config: GuildProtectionConfig, guild_id: int, *, row: int):
        self.toggle = toggle
        enabled = config.is_enabled(toggle)
        super().__init__(
            label=toggle_label(config, toggle),
            style=toggle_style(enabled),
            custom_id=encode_custom_id(toggle.value, guild_id),
            row=row,
        )

    async def callback(self, interaction: discord.Interaction) -> None:
        view: AntiRaidPanelView = self.view  # type: ignore[assignment]

        _, custom_guild_id = decode_custom_id(self.custom_id)
        if custom_guild_id != view.guild_id:
            logger.warning(
                "[ANTIRAID PANEL] Guild id mismatch in button %s: expected %s",
                self.custom_id, view.guild_id,
            )
            return

        if self.toggle is ProtectionToggle.ANTI_FAKE:
            await view.open_anti_fake_dialog(interaction)
        else:
            await view.handle_toggle(interaction, self.toggle)


class AntiFakeModal(discord.ui.Modal):
    """Dialog asking for the minimum account age in days."""

    def __init__(self, panel: "AntiRaidPanelView"):
        super().__init__(
            title="Anti-Fake Settings",
            custom_id=encode_custom_id(ANTI_FAKE_MODAL_ACTION, panel.guild_id),
        )
        self.panel = panel
        self.add_item(
            discord.ui.InputText(
                label="Minimum account age (days)",
                custom_id="minDays",
                style=discord.InputTextStyle.short,
                placeholder="Enter a number (e.g., 7)",
                required=True,
            )
        )

    async def callback(self, interaction: discord.Interaction) -> None:
        await self.panel.apply_min_days(interaction, self.children[0].value)

    async def on_error(self, error: Exception, interaction: discord.Interaction) -> None:
        logger.error(
            "[ANTIRAID PANEL] Error handling Anti-Fake dialog for guild %s: %s",
            self.panel.guild_id, error, exc_info=error,
        )
        await send_ephemeral_error(interaction, MODAL_ERROR_MESSAGE)


class AntiRaidPanelView(discord.ui.View):
    """Button panel bound to one guild and one invoking user."""

    def __init__(
        self,
        settings_manager: GuildSettingsManager,
        guild_id: int,
        invoker_id: int,
        *,
        timeout_seconds: float = 300,
    ):
        super().__init__(timeout=timeout_seconds)
        self.settings_manager = settings_manager
        self.guild_id = guild_id
        self.invoker_id = invoker_id
        self.state = PanelState.OPEN
        # Set by the command once the panel has been sent; used to edit it later
        self.origin_interaction: Optional[discord.Interaction] = None
        self.refresh_items()

    def refresh_items(self) -> None:
        """Rebuild the buttons from the stored configuration."""
        self.clear_items()
        config = self.settings_manager.get_guild_settings(self.guild_id)
        for row, toggles in enumerate(PANEL_LAYOUT):
            for toggle in toggles:
                self.add_item(ProtectionButton(toggle, config, self.guild_id, row=row))

    async def interaction_check(self, interaction: discord.Interaction) -> bool:
        user = interaction.user
        if user is not None and user.id == self.invoker_id:
            return True
        await interaction.response.send_message(NOT_INVOKER_MESSAGE, ephemeral=True)
        return False

    async def handle_toggle(self, interaction: discord.Interaction, toggle: ProtectionToggle) -> None:
        await self.settings_manager.toggle_protection(self.guild_id, toggle)
        self.state = PanelState.OPEN
        self.refresh_items()
        await interaction.response.edit_message(embed=build_panel_embed(), view=self)

    async def open_anti_fake_dialog(self, interaction: discord.Interaction) -> None:
        self.state = PanelState.AWAITING_DIALOG
        await interaction.response.send_modal(AntiFakeModal(self))

    async def apply_min_days(self, interaction: discord.Interaction, raw_value: Optional[str]) -> None:
        """Validate the dialog input and enable Anti-Fake with it."""
        if self.state is PanelState.AWAITING_DIALOG:
            self.state = PanelState.OPEN

        min_days = parse_min_days(raw_value)
        if min_days is None:
            await interaction.response.send_message(INVALID_DAYS_MESSAGE, ephemeral=True)
            return

        await self.settings_manager.set_anti_fake(self.guild_id, min_days)
        await interaction.response.send_message(
            f"Anti-Fake is now ON with a minimum account age of {min_days} days.",
            ephemeral=True,
        )
        await self.rerender()

    async def rerender(self) -> None:
        """Redraw the original panel message so labels match the stored state."""
        if self.origin_interaction is None or self.state is PanelState.CLOSED:
            return
        self.refresh_items()
        try:
            await self.origin_interaction.edit_original_response(embed=build_panel_embed(), view=self)
        except discord.HTTPException as exc:
            logger.warning("[ANTIRAID PANEL] Could not refresh panel for guild %s: %s", self.guild_id, exc)

    async def on_timeout(self) -> None:
        self.state = PanelState.CLOSED
        if self.origin_interaction is None:
            return
        try:
            await self.origin_interaction.edit_original_response(
                embed=build_panel_embed(closed=True),
                view=None,
            )
        except discord.HTTPException as exc:
            logger.error("[ANTIRAID PANEL] Failed to close panel for guild %s: %s", self.guild_id, exc)

    async def on_error(self, error: Exception, item: discord.ui.Item, interaction: discord.Interaction) -> None:
        custom_id = getattr(item, "custom_id", None)
        logger.error(
            "[ANTIRAID PANEL] Error handling button %s for guild %s (response done: %s): %s",
            custom_id, self.guild_id, interaction.response.is_done(), error,
            exc_info=error,
        )
        await send_ephemeral_error(interaction, BUTTON_ERROR_MESSAGE)
