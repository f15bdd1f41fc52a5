"""Run environment value type and conditional execution helpers"""
import inspect
from enum import Enum
from typing import Any, Callable


class RunEnvironment(Enum):
    """Distribution environment an application is running in.

    ``XCODE``, ``SANDBOX`` and ``PRODUCTION`` are aliases of the three
    canonical members, so ``RunEnvironment.XCODE is RunEnvironment.DEBUG``
    and iteration only yields ``DEBUG``, ``TEST_FLIGHT`` and ``APP_STORE``.

    Usage::

        env = RunEnvironment.current()
        if env.is_debug:
            enable_debug_logging()
        elif env.is_test_flight:
            enable_analytics(level="basic")
        else:
            enable_analytics(level="full")

        (RunEnvironment.current()
            .on_debug(lambda: print("local build"))
            .on_review(lambda env: print(f"{env} under review")))
    """
    DEBUG = "debug"
    TEST_FLIGHT = "testFlight"
    APP_STORE = "appStore"

    # Aliases
    XCODE = "debug"
    SANDBOX = "testFlight"
    PRODUCTION = "appStore"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def current(cls) -> 'RunEnvironment':
        """Detect the environment of the running process"""
        from .context import runtime_context
        return runtime_context.current()

    @classmethod
    def from_string(cls, text: str) -> 'RunEnvironment':
        """Resolve an identifier ("testFlight") or member name ("SANDBOX")"""
        key = text.strip().lower()
        for name, member in cls.__members__.items():
            if key in (member.value.lower(), name.lower(), name.lower().replace('_', '')):
                return member
        raise ValueError(f"Unknown run environment: {text!r}")

    @property
    def is_debug(self) -> bool:
        return self is RunEnvironment.DEBUG

    @property
    def is_test_flight(self) -> bool:
        return self is RunEnvironment.TEST_FLIGHT

    @property
    def is_app_store(self) -> bool:
        return self is RunEnvironment.APP_STORE

    @property
    def under_review(self) -> bool:
        """Best-effort check for automated review tooling.

        Looks for the CFNetwork diagnostics variables the review tooling sets.
        A developer can set them by hand too, so treat this as a hint.
        """
        from .context import runtime_context
        return runtime_context.under_review()

    def on_debug(self, action: Callable[..., Any]) -> 'RunEnvironment':
        """Run ``action`` if this is the debug environment.

        ``action`` is passed this environment when it has a positional
        parameter without a default, or ``*args``; otherwise it is called
        with no arguments. The same applies to the other ``on_*`` helpers.
        Exceptions raised by ``action`` propagate unchanged.
        """
        if self is RunEnvironment.DEBUG:
            self._invoke(action)
        return self

    def on_test_flight(self, action: Callable[..., Any]) -> 'RunEnvironment':
        """Run ``action`` if this is the TestFlight environment"""
        if self is RunEnvironment.TEST_FLIGHT:
            self._invoke(action)
        return self

    def on_app_store(self, action: Callable[..., Any]) -> 'RunEnvironment':
        """Run ``action`` if this is the App Store environment"""
        if self is RunEnvironment.APP_STORE:
            self._invoke(action)
        return self

    def on_review(self, action: Callable[..., Any]) -> 'RunEnvironment':
        """Run ``action`` if the app looks like it is under review"""
        if self.under_review:
            self._invoke(action)
        return self

    def _invoke(self, action: Callable[..., Any]) -> None:
        """Call ``action`` with this environment if it takes an argument"""
        if _accepts_argument(action):
            action(self)
        else:
            action()


def _accepts_argument(action: Callable[..., Any]) -> bool:
    """Check whether a callable requires a positional argument or takes *args"""
    try:
        signature = inspect.signature(action)
    except (TypeError, ValueError):
        # Some builtins expose no signature
        return False

    for parameter in signature.parameters.values():
        if parameter.kind is inspect.Parameter.VAR_POSITIONAL:
            return True
        if (parameter.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
                and parameter.default is inspect.Parameter.empty):
            return True
    return False
