"""
Alert Commands.

`alerts` prints raised alerts, or streams them live; `alert` manages
alert settings and their conditions.
"""

from typing import Optional

import typer

from lenscli.api.models import (
    Alert,
    AlertSetting,
    AlertSettingConditionPayload,
    AlertSettingConditionsPayload,
)
from lenscli.cli.context import get_state
from lenscli.cli.output import OutputMode
from lenscli.cli.payload import PayloadResolver, load_file
from lenscli.cli.validation import check_required
from lenscli.core.exceptions import not_found_hint
from lenscli.core.logging import get_logger

logger = get_logger(__name__)

alert_app = typer.Typer(help="Manage alert settings and their conditions", no_args_is_help=True)
setting_app = typer.Typer(help="Print or enable a specific alert setting")
condition_app = typer.Typer(help="Manage an alert setting's conditions", no_args_is_help=True)

alert_app.add_typer(setting_app, name="setting")
setting_app.add_typer(condition_app, name="condition")


def alerts(
    ctx: typer.Context,
    live: bool = typer.Option(False, "--live", help="Stream alerts as the server raises them"),
    page_size: int = typer.Option(25, "--page-size", help="Number of alerts to include in the list"),
) -> None:
    """
    Print the registered alerts.

    Examples:
        lenscli alerts
        lenscli alerts --page-size=100
        lenscli -o json alerts --live
    """
    state = get_state(ctx)
    client = state.get_client()
    out = state.renderer()

    if live:
        client.get_alerts_live(lambda alert: out.render(alert, model=Alert))
        return

    out.render(client.get_alerts(page_size), model=Alert)


@alert_app.command()
def settings(ctx: typer.Context) -> None:
    """
    Print all alert settings, grouped by category in JSON.

    Examples:
        lenscli alert settings
    """
    state = get_state(ctx)
    alert_settings = state.get_client().get_alert_settings()
    out = state.renderer()

    if out.mode is OutputMode.TABLE:
        categories = alert_settings.categories
        out.render(
            categories.infrastructure + categories.consumers + categories.producers,
            model=AlertSetting,
        )
        return

    out.render(alert_settings)


@setting_app.callback(invoke_without_command=True)
def setting(
    ctx: typer.Context,
    setting_id: Optional[int] = typer.Option(None, "--id", help="Alert setting ID, e.g. 1001"),
    enable: Optional[bool] = typer.Option(None, "--enable/--disable", help="Enable or disable the alert setting"),
    silent: bool = typer.Option(False, "--silent", help="Do not print info messages"),
) -> None:
    """
    Print an alert setting, or enable/disable it.

    Examples:
        lenscli alert setting --id=1001
        lenscli alert setting --id=1001 --disable
    """
    if ctx.invoked_subcommand is not None:
        return

    check_required({"id": setting_id})

    state = get_state(ctx)
    client = state.get_client()
    out = state.renderer(silent=silent)

    with not_found_hint(f"alert setting '{setting_id}' does not exist"):
        if enable is not None:
            client.enable_alert_setting(setting_id, enable)
            out.info(f"Alert setting [{setting_id}] {'enabled' if enable else 'disabled'}")
            return

        alert_setting = client.get_alert_setting(setting_id)
    out.render(alert_setting, model=AlertSetting)


@setting_app.command()
def conditions(
    ctx: typer.Context,
    alert: Optional[int] = typer.Option(None, "--alert", help="Alert setting ID, e.g. 1001"),
) -> None:
    """
    Print an alert setting's conditions, keyed by condition UUID.

    Examples:
        lenscli alert setting conditions --alert=1001
    """
    check_required({"alert": alert})

    state = get_state(ctx)
    with not_found_hint(f"alert setting '{alert}' does not exist"):
        setting_conditions = state.get_client().get_alert_setting_conditions(alert)
    state.renderer().render_mapping(setting_conditions, headers=("UUID", "Condition"))


def _holds_many(file: Optional[str]) -> bool:
    return file is not None and any(str(key).lower() == "conditions" for key in load_file(file))


def set_condition(
    ctx: typer.Context,
    file: Optional[str] = typer.Argument(None, help="YAML or JSON file with one condition or a list of them"),
    alert: Optional[int] = typer.Option(None, "--alert", help="Alert setting ID"),
    condition: Optional[str] = typer.Option(
        None, "--condition", help='Alert condition, e.g. "lag >= 100000 on group group and topic topicA"'
    ),
    silent: bool = typer.Option(False, "--silent", help="Do not print info messages"),
) -> None:
    """
    Create or update an alert setting's condition, or several from a file.

    A file may hold a single `alert` and `condition`, or an `alert` and a
    `conditions` list.

    Examples:
        lenscli alert setting condition set --alert=1001 --condition="lag >= 100000"
        lenscli alert setting condition set ./alert_conditions.yml
    """
    state = get_state(ctx)
    out = state.renderer(silent=silent)

    if _holds_many(file):
        many = PayloadResolver(AlertSettingConditionsPayload, name_field=None).resolve(
            file=file,
            flags={"alert": alert},
        )
        check_required({"alert": many.alert, "conditions": many.conditions})
        pending = [(many.alert, text) for text in many.conditions]
    else:
        one = PayloadResolver(AlertSettingConditionPayload, name_field=None).resolve(
            file=file,
            flags={"alert": alert, "condition": condition},
        )
        check_required({"alert": one.alert, "condition": one.condition})
        pending = [(one.alert, one.condition)]

    client = state.get_client()
    for alert_id, text in pending:
        with not_found_hint(f"alert setting '{alert_id}' does not exist"):
            client.create_or_update_alert_setting_condition(alert_id, text)
        logger.debug("Alert condition set", alert=alert_id, condition=text)
        out.info(f"Condition [id={alert_id}] added")


condition_app.command("set")(set_condition)
condition_app.command("create", hidden=True)(set_condition)
condition_app.command("update", hidden=True)(set_condition)


@condition_app.command("delete")
def delete_condition(
    ctx: typer.Context,
    alert: Optional[int] = typer.Option(None, "--alert", help="Alert setting ID"),
    condition: Optional[str] = typer.Option(
        None, "--condition", help='Condition UUID, e.g. "28bbad2b-69bb-4c01-8e37-28e2e7083aa9"'
    ),
    silent: bool = typer.Option(False, "--silent", help="Do not print info messages"),
) -> None:
    """
    Delete an alert setting's condition.

    Examples:
        lenscli alert setting condition delete --alert=1001 --condition="28bbad2b-69bb-4c01-8e37-28e2e7083aa9"
    """
    check_required({"alert": alert, "condition": condition})

    state = get_state(ctx)
    with not_found_hint(f"condition '{condition}' of alert setting '{alert}' does not exist"):
        state.get_client().delete_alert_setting_condition(alert, condition)
    state.renderer(silent=silent).info(f"Condition [{condition}] for alert setting [{alert}] deleted")
