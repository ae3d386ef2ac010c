from debatify import create_app, socketio

app = create_app()

if __name__ == '__main__':
    # Use SocketIO server to enable websockets in dev; the reloader would
    # spawn a second process with its own timer
    socketio.run(app, debug=True, use_reloader=False)
