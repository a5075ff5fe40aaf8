from scramble import socketio


def _scheduler_disabled(app) -> bool:
    return bool(app.config.get('TESTING') and not app.config.get('ENABLE_SCHEDULER_IN_TESTS'))


def start_ticker(app, session) -> None:
    """Drive the session's one-second clock from a background task.

    - No-ops in TESTING mode (tests call tick() themselves)
    - One ticker per session; it exits once the session is closed
    - Every tick runs through session.dispatch, so it never interleaves
      with a guess or an admin command
    """
    if _scheduler_disabled(app) or session.ticker_started:
        return
    session.ticker_started = True
    interval = float(app.config.get('TICK_INTERVAL_SEC', 1.0))
    heartbeat = int(app.config.get('TIMER_HEARTBEAT_SEC', 0))
    app.logger.info(f"[timer-set] channel={session.channel} interval={interval}s")

    def _worker():
        ticks = 0
        while not session.closed:
            socketio.sleep(interval)
            if session.closed:
                break
            session.dispatch(lambda machine: machine.tick())
            ticks += 1
            if heartbeat > 0 and ticks % heartbeat == 0:
                app.logger.info(
                    f"[timer-heartbeat] channel={session.channel} phase={session.machine.phase.value} ticks={ticks}"
                )
        app.logger.info(f"[timer-stop] channel={session.channel}")

    socketio.start_background_task(_worker)


def make_deferrer(app, session):
    """Build the `defer(delay, fn)` callable a session's machine schedules with.

    In TESTING mode the continuation is queued on the session and runs as soon
    as the current dispatch finishes, without the delay. Otherwise a background
    task sleeps for `delay` and then dispatches `fn`. Either way `fn` runs
    under the session lock and re-validates its own round before acting.
    """
    def defer(delay: float, fn) -> None:
        if _scheduler_disabled(app):
            session.enqueue(fn)
            return

        def _worker():
            socketio.sleep(delay)
            if session.closed:
                app.logger.info(f"[timer-abort] channel={session.channel} session closed")
                return
            app.logger.info(f"[timer-fire] channel={session.channel} delay={delay}s")
            session.dispatch(lambda machine: fn())

        socketio.start_background_task(_worker)

    return defer
