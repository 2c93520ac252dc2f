from flask import Blueprint

main = Blueprint('main', __name__)

GREETING = 'Hello, Guess Number!'

@main.route('/hello', methods=['GET'])
def hello():
    # Health check for deployments
    return GREETING, 200
