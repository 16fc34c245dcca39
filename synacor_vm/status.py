"""
Synacor VM — HTTP Status Page

Read-only view of a VM while it runs:
  GET /                      plain-text summary (registers, PC, stack)
  GET /api/state             JSON snapshot
  GET /api/memory?start=&length=
                             JSON window of memory words
  GET /memory?start=&length=
                             plain-text word dump with printable chars

Routes only read SynacorVM.snapshot() / Memory.snapshot() / dump(); nothing
here takes a lock or mutates the VM.
"""

import logging
import threading

from flask import Flask, Response, jsonify, request

from .config import MEMORY_SIZE, STATUS_MEMORY_WINDOW

log = logging.getLogger(__name__)


def _window_args():
    """Parse start/length query args. Returns (start, length, error)."""
    try:
        start = int(request.args.get('start', 0))
        length = int(request.args.get('length', 64))
    except ValueError:
        return 0, 0, "start and length must be integers"
    if not 0 <= start < MEMORY_SIZE:
        return 0, 0, f"start must be in 0..{MEMORY_SIZE - 1}"
    if not 0 < length <= STATUS_MEMORY_WINDOW:
        return 0, 0, f"length must be in 1..{STATUS_MEMORY_WINDOW}"
    return start, length, None


def create_app(vm) -> Flask:
    app = Flask(__name__)

    @app.route('/')
    def index():
        snap = vm.snapshot()
        lines = [
            "Synacor Challenge - VM Status",
            "",
            f"State: {snap['state']}" + (f" ({snap['reason']})" if snap['reason'] else ""),
            f"PC:    {snap['pc']}",
            f"Steps: {snap['steps']}",
            "",
            "Registers",
            "---------",
            "",
        ]
        for i, value in enumerate(snap['registers']):
            lines.append(f"R{i}: {value}")
        lines += [
            "",
            f"Stack depth: {len(snap['stack'])}",
        ]
        if snap['fault']:
            lines += ["", f"Fault: {snap['fault']}"]
        return Response('\n'.join(lines) + '\n', mimetype='text/plain')

    @app.route('/api/state')
    def state():
        return jsonify(vm.snapshot())

    @app.route('/api/memory')
    def memory():
        start, length, error = _window_args()
        if error:
            return jsonify({"error": error}), 400
        words = vm.mem.snapshot(start, length)
        return jsonify({"start": start, "length": len(words), "words": words})

    @app.route('/memory')
    def memory_dump():
        start, length, error = _window_args()
        if error:
            return Response(error + '\n', status=400, mimetype='text/plain')
        return Response(vm.mem.dump(start, length) + '\n', mimetype='text/plain')

    return app


def start_status_server(vm, host: str, port: int) -> threading.Thread:
    """Serve the status page from a daemon thread.

    The thread dies with the process; the VM run loop never waits on it.
    """
    app = create_app(vm)
    thread = threading.Thread(
        target=app.run,
        kwargs={"host": host, "port": port, "debug": False, "use_reloader": False},
        name="synvm-status",
        daemon=True,
    )
    thread.start()
    log.info("Status page on http://%s:%d/", host, port)
    return thread
