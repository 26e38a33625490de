from boxer import create_app, socketio

app = create_app()
 
if __name__ == '__main__':
    # Use the SocketIO server so background tasks share its async mode
    socketio.run(app, debug=True)
