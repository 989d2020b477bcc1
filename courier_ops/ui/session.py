"""
Session liveness for objects that outlive a script run.

Timers and channel listeners keep running after a browser tab is closed;
they poll this predicate and tear themselves down once it is False.
"""

from typing import Callable

from streamlit import runtime
from streamlit.runtime.scriptrunner import get_script_run_ctx


def session_liveness() -> Callable[[], bool]:
    """
    Predicate bound to the CURRENT Streamlit session.

    Must be called from the script thread. Outside a Streamlit run
    (bare mode, tests) the predicate always answers True.
    """
    ctx = get_script_run_ctx()
    if ctx is None or not runtime.exists():
        return lambda: True

    session_id = ctx.session_id

    def is_alive() -> bool:
        if not runtime.exists():
            return False
        return runtime.get_instance().is_active_session(session_id)

    return is_alive
