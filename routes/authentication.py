from flask import Blueprint, request, jsonify, make_response, current_app
from models.users import User
from models import db
from utils.tokens import get_jwt_token, decode_jwt
from utils.utils import get_request_token
from classes.validators import validate_length

auth_bp = Blueprint('auth_bp', __name__)

SELF_REGISTER_ROLES = ("student", "instructor")


def set_token_cookie(response, token, max_age):
    response.set_cookie(
        "access_token", token,
        httponly=True,
        secure=current_app.config["JWT_COOKIE_SECURE"],
        samesite=current_app.config["JWT_COOKIE_SAMESITE"],
        path="/",
        max_age=max_age
    )
    return response

# Login
@auth_bp.route('/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or {}
    username = data.get("username_or_email")
    password = data.get("password")

    if not username or not password:
        return jsonify({"error": "Username and password are required"}), 400

    user = User.query.filter((User.username == username) | (User.email == username)).first()

    if not user or not user.check_password(password):
        return jsonify({"error": "Invalid credentials"}), 401

    token = get_jwt_token({
        "user_id": user.id,
        "username_or_email": user.username,
        "role": user.role,
    })

    response = make_response(jsonify({
        "message": "Login successful",
        "token": token,
        "user": {
            "id": user.id,
            "role": user.role,
            "username": user.username,
            "email": user.email
        }
    }))

    return set_token_cookie(response, token, current_app.config["JWT_EXPIRATION_HOURS"] * 3600)

# Logout
@auth_bp.route('/logout', methods=['POST'])
def logout():
    response = make_response(jsonify({"message": "Logout successful"}))
    return set_token_cookie(response, "", 0)

# Register
@auth_bp.route('/register', methods=['POST'])
def register():
    data = request.get_json(silent=True) or {}

    username = data.get('username')
    email = data.get('email')
    password = data.get('password')
    full_name = data.get('full_name')
    role = data.get('role', 'student')

    if not username or not email or not password or not full_name:
        return jsonify({"error": "All fields are required"}), 400

    if role not in SELF_REGISTER_ROLES:
        return jsonify({"error": "Invalid role"}), 400

    try:
        validate_length("Username", username, 50)
        validate_length("Email", email, 100)
        validate_length("Full name", full_name, 100)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    existing_user = User.query.filter(
        (User.username == username) | (User.email == email)
    ).first()

    if existing_user:
        return jsonify({"error": "User already exists"}), 409

    new_user = User(
        username=username,
        email=email,
        full_name=full_name,
        role=role
    )
    new_user.set_password(password)

    db.session.add(new_user)
    db.session.commit()

    return jsonify({"message": "User registered successfully!", "user": new_user.to_dict()}), 201

# Auth Check
@auth_bp.route('/check-auth', methods=['GET'])
def check_auth():
    token = get_request_token()

    if not token:
        return jsonify({"error": "Not authenticated"}), 401

    decoded_token = decode_jwt(token)
    if not decoded_token:
        return jsonify({"error": "Invalid or expired token"}), 401

    return jsonify({
        "message": "Authenticated",
        "user": {
            "id": decoded_token.get("user_id"),
            "role": decoded_token.get("role"),
            "username_or_email": decoded_token.get("username_or_email"),
        }
    }), 200
