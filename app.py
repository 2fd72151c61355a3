#!/usr/bin/env python3
"""
Cantonese Learning App - Flask Web Application
Chat interface where an AI tutor practices vocabulary with the user and
keeps their word list up to date through tool calls.
Requires OpenAI API (or an OpenAI-compatible endpoint) for the tutor.
"""

import os
import sys
import traceback
import argparse
from typing import List, Optional, Dict, Any

from flask import Flask, Response, render_template, request, jsonify
from openai import OpenAI

# Add the current directory to the path so we can import our modules
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from llm_learn_cantonese import db
from llm_learn_cantonese.agent import CantoneseAgent, PRESETS, DEFAULT_PRESET, DEFAULT_MODEL, DEFAULT_MAX_STEPS
from llm_learn_cantonese.errors import StoreUnavailable
from llm_learn_cantonese.queries import VocabularyQueries

# Check for test mode
TEST_MODE = os.environ.get("TEST_MODE", "0") == "1"

# Check for debug mode
DEBUG = os.environ.get("DEBUG", "0") == "1"

# Global state, set up once per process
client: Optional[Any] = None
store: Optional[db.VocabularyStore] = None

app = Flask(__name__)
app.secret_key = os.environ.get('SECRET_KEY', 'dev-secret-key-change-in-production')
app.config['MODEL_NAME'] = DEFAULT_MODEL
app.config['DEFAULT_AGENT'] = DEFAULT_PRESET
app.config['MAX_STEPS'] = DEFAULT_MAX_STEPS
app.config['DB_PATH'] = db.DB_PATH


def init_ai(api_key: Optional[str] = None,
            base_url: Optional[str] = None,
            model_name: str = DEFAULT_MODEL) -> None:
    """Initialize the OpenAI client."""
    global client

    if TEST_MODE:
        return

    if not api_key:
        api_key = os.environ.get("OPENAI_API_KEY")

    if not api_key:
        print("Warning: No API key provided. AI features will be disabled.")
        return

    client_kwargs = {"api_key": api_key}
    if base_url:
        client_kwargs["base_url"] = base_url

    client = OpenAI(**client_kwargs)
    app.config['MODEL_NAME'] = model_name
    print(f"✅ AI initialized with model: {model_name}")


def init_store(db_path: Optional[str] = None) -> db.VocabularyStore:
    """Open the process-wide vocabulary store (replacing any previous one)."""
    global store
    if store is not None:
        store.close()
    store = db.VocabularyStore(db_path or app.config['DB_PATH']).init()
    return store


def get_store() -> db.VocabularyStore:
    if store is None or not store.is_open:
        return init_store()
    return store


# Try to initialize with environment variables by default
if not TEST_MODE:
    init_ai()


@app.before_request
def initialize_app() -> None:
    """Open the database on the first request."""
    if not hasattr(app, '_database_initialized'):
        try:
            get_store()
            if DEBUG:
                print("✅ Database initialized on startup")
        except StoreUnavailable as e:
            print(f"❌ Database startup check failed: {e.message}")
        setattr(app, "_database_initialized", True)


@app.errorhandler(StoreUnavailable)
def handle_store_unavailable(error: StoreUnavailable) -> Any:
    return jsonify({'status': 'error', 'message': error.message}), 503


def _validate_messages(messages: Any) -> Optional[str]:
    if not isinstance(messages, list):
        return "Messages must be an array"
    for message in messages:
        if not isinstance(message, dict):
            return "Each message must be an object"
        if message.get('role') not in ('user', 'assistant'):
            return "Message role must be 'user' or 'assistant'"
        if not isinstance(message.get('content'), str):
            return "Message content must be a string"
    return None


@app.route('/')
def index() -> Any:
    """Chat page."""
    try:
        word_count = get_store().count()
    except StoreUnavailable as e:
        word_count = None
        if DEBUG:
            print(f"Error getting word count: {e.message}")

    return render_template('index.html',
                           word_count=word_count,
                           agents=list(PRESETS),
                           default_agent=app.config['DEFAULT_AGENT'])


@app.route('/api/chat', methods=['POST'])
def api_chat() -> Any:
    """Run one chat turn through the tutor agent."""
    data = request.get_json(silent=True) or {}
    messages: List[Dict[str, str]] = data.get('messages')

    problem = _validate_messages(messages)
    if problem:
        return jsonify({'status': 'error', 'message': problem}), 400

    preset = data.get('agent') or app.config['DEFAULT_AGENT']
    if preset not in PRESETS:
        return jsonify({'status': 'error', 'message': f"Unknown agent '{preset}'"}), 400

    if client is None:
        return jsonify({'status': 'error',
                        'message': 'AI model is not configured. Please ensure OpenAI credentials are set.'}), 503

    try:
        agent = CantoneseAgent(client, get_store(), preset=preset,
                               model_name=app.config['MODEL_NAME'],
                               max_steps=app.config['MAX_STEPS'])
        reply = agent.run(messages)
    except StoreUnavailable:
        raise
    except Exception as e:
        print(f"Chat API error: {e}")
        if DEBUG:
            traceback.print_exc()
        return jsonify({'status': 'error', 'message': 'Internal server error'}), 500

    return jsonify({
        'status': 'success',
        'response': reply.text,
        'tool_calls': [call.to_dict() for call in reply.tool_calls],
        'stopped_early': reply.stopped_early,
    })


@app.route('/api/words')
def api_words() -> Any:
    """All words, alphabetical."""
    words = get_store().list_all()
    return jsonify({'status': 'success',
                    'words': [w.to_dict() for w in words],
                    'count': len(words)})


@app.route('/api/words/export')
def api_words_export() -> Any:
    """All words as 'english, jyutping' lines."""
    text = VocabularyQueries(get_store()).export_text()
    return Response(text, mimetype='text/plain')


def get_local_ip() -> str:
    """Attempt to determine the local network IP address."""
    import socket
    try:
        # Connect to an external server (doesn't actually send data)
        # to determine the interface used for internet access
        s = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        s.connect(("8.8.8.8", 80))
        local_ip = s.getsockname()[0]
        s.close()
        return local_ip
    except OSError:
        return "127.0.0.1"


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Cantonese Learning App')
    parser.add_argument('--host', help='Host IP to bind to (default: auto-detect local IP)')
    parser.add_argument('--port', type=int, default=5000, help='Port to bind to (default: 5000)')
    parser.add_argument('--openai-key', help='OpenAI API Key')
    parser.add_argument('--openrouter-key', help='OpenRouter API Key (overrides OpenAI key)')
    parser.add_argument('--model', default=DEFAULT_MODEL, help='AI model name')
    parser.add_argument('--agent', default=DEFAULT_PRESET, choices=list(PRESETS), help='Default tutor preset')
    parser.add_argument('--max-steps', type=int, default=DEFAULT_MAX_STEPS,
                        help='Maximum model calls per chat turn (default: 30)')
    parser.add_argument('--db', help='SQLite database path (default: $LLM_CANTO_DB or data/vocabulary.db)')
    parser.add_argument('--debug', action='store_true', help='Enable debug mode')

    args = parser.parse_args()

    if args.debug:
        DEBUG = True

    app.config['DEFAULT_AGENT'] = args.agent
    app.config['MAX_STEPS'] = args.max_steps
    if args.db:
        app.config['DB_PATH'] = args.db

    # Re-initialize AI if arguments are provided
    if args.openai_key or args.openrouter_key or args.model:
        api_key = args.openrouter_key or args.openai_key
        base_url = "https://openrouter.ai/api/v1" if args.openrouter_key else None
        init_ai(api_key=api_key, base_url=base_url, model_name=args.model)

    # Initialize database
    try:
        init_store()
        print(f"✅ Database ready: {app.config['DB_PATH']}")
    except StoreUnavailable as e:
        print(f"❌ Database initialization failed: {e.message}")
        sys.exit(1)

    host = args.host or get_local_ip()
    print(f"🚀 Starting server on http://{host}:{args.port}")
    app.run(debug=DEBUG, host=host, port=args.port)
