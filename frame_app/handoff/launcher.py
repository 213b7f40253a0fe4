from __future__ import annotations

from typing import Any, Mapping, Optional, Union

from loguru import logger

from frame_app.core.outcome import ErrorKind, Failure, Outcome
from frame_app.core.ports import Notifier, Scheduler, WindowHandle, WindowOpener
from frame_app.core.settings import AppSettings

from .constants import BULK_TARGET
from .models import MemberContext, WindowFeatures

ALERT_TITLE = "Member selector"


class SelectorLauncher:
    """
    Frame analyzer side: opens the steel section selector for one member
    (or for all members in bulk mode).

    The member context travels in the selector URL. A deferred check logs a
    warning if the window was closed right away; it never affects the result.
    """

    def __init__(
        self,
        opener: WindowOpener,
        notifier: Notifier,
        scheduler: Scheduler,
        settings: Optional[AppSettings] = None,
    ) -> None:
        self.opener = opener
        self.notifier = notifier
        self.scheduler = scheduler
        self.settings = settings or AppSettings()

    def selector_url(self, context: MemberContext) -> str:
        return f"{self.settings.selector_url}?{context.to_query()}"

    def window_features(self) -> WindowFeatures:
        sw, sh = self.opener.screen_size()
        return WindowFeatures.centered(sw, sh, self.settings.window_width, self.settings.window_height)

    def open_selector(
        self, member_index: Any, current_properties: Optional[Mapping[str, Any]] = None
    ) -> Outcome[WindowHandle]:
        if isinstance(member_index, bool) or not isinstance(member_index, int) or member_index < 0:
            return self._fail(
                Failure(ErrorKind.INVALID_ARGUMENT, f"Invalid member index: {member_index!r}"),
                member_index,
                current_properties,
            )
        return self._open(member_index, current_properties)

    def open_bulk_selector(self, current_properties: Optional[Mapping[str, Any]] = None) -> Outcome[WindowHandle]:
        return self._open(BULK_TARGET, current_properties)

    def _open(self, target: Union[int, str], current_properties: Optional[Mapping[str, Any]]) -> Outcome[WindowHandle]:
        try:
            context = MemberContext.from_properties(target, current_properties)
            url = self.selector_url(context)
            features = self.window_features().to_feature_string()
            handle = self.opener.open(url, self.settings.window_name, features)
        except Exception as e:
            return self._fail(Failure(ErrorKind.UNEXPECTED, str(e)), target, current_properties, exc=e)

        if handle is None:
            return self._fail(
                Failure(
                    ErrorKind.WINDOW_CREATION_BLOCKED,
                    "The member selector window was blocked (check the popup blocker).",
                ),
                target,
                current_properties,
            )

        def _liveness_check() -> None:
            if handle.closed:
                logger.warning(f"Member selector window closed unexpectedly (target={target})")

        self.scheduler.call_later(self.settings.liveness_check_delay_s, _liveness_check)
        logger.info(f"Member selector opened: {url}")
        return Outcome.success(handle)

    def _fail(
        self,
        failure: Failure,
        member_index: Any,
        current_properties: Optional[Mapping[str, Any]],
        exc: Optional[BaseException] = None,
    ) -> Outcome[WindowHandle]:
        props = dict(current_properties) if isinstance(current_properties, Mapping) else current_properties
        log = logger.bind(kind=failure.kind.value, member_index=member_index, current_properties=props)
        msg = (
            f"Could not open member selector: {failure.message} "
            f"(kind={failure.kind.value}, member_index={member_index!r}, current_properties={props!r})"
        )
        log.opt(exception=exc).error(msg)
        try:
            self.notifier.alert(ALERT_TITLE, f"Could not open the member selector: {failure.message}")
        except Exception as e:
            logger.warning(f"Could not show failure notification: {e}")
        return Outcome.failure(failure)
