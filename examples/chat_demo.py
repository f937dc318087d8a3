"""Minimal console chat against a running backend."""

import sys

from chat_core.api import service

if __name__ == "__main__":
    if not service.check_backend():
        print("Warning:", service.get_state()["error"])
    engine = service.get_default_engine()
    printed = {}

    def on_change(event, message_id):
        # 逐段打印助手消息的增量
        if event != "update":
            return
        view = engine.store.get(message_id)
        sys.stdout.write(view.content[printed.get(message_id, 0):])
        sys.stdout.flush()
        printed[message_id] = len(view.content)

    engine.subscribe(on_change)
    while True:
        try:
            text = input("\nYou: ")
        except EOFError:
            break
        if not text.strip():
            continue
        sys.stdout.write("Assistant: ")
        result = service.send_message(text)
        if result["outcome"]["status"] != "success":
            print("\n[error]", result["outcome"]["message"])
