"""
Quark Inspection Server - Flask Backend

Provides REST API endpoints to assemble CSV sources and inspect binary
images over HTTP.
"""

import os

from flask import Flask, request, jsonify
from werkzeug.utils import secure_filename

from .assembler import Assembler
from .config import ConfigError, get_config_summary, load_config
from .decoder import inspect_image
from .errors import AssemblerError
from .instructions import FORMATS


app = Flask(__name__)

# Global state
_config: dict = load_config(None)


def configure(config: dict) -> None:
    """Install a configuration for subsequent requests."""
    global _config
    _config = config
    app.config['MAX_CONTENT_LENGTH'] = config['max_upload_bytes']


configure(_config)


def error_response(error: str, message: str, status: int = 400, **extra) -> tuple:
    """Create a standardized error response."""
    body = {'error': error, 'message': message}
    body.update(extra)
    return jsonify(body), status


def assembler_error_response(error: str, e: AssemblerError) -> tuple:
    """Error response for an assembler failure, naming the row if known."""
    return error_response(error, e.reason, row=e.row_num, kind=type(e).__name__)


def require_file_upload() -> tuple | None:
    """Validate file upload and return error response if invalid, None if valid."""
    if 'file' not in request.files:
        return error_response('No file provided', 'Request must include a file field')
    if request.files['file'].filename == '':
        return error_response('No file selected', 'File field is empty')
    return None


@app.after_request
def add_cors_headers(response):
    """Add CORS headers to all responses for local development."""
    response.headers['Access-Control-Allow-Origin'] = '*'
    response.headers['Access-Control-Allow-Methods'] = 'GET, POST, OPTIONS'
    response.headers['Access-Control-Allow-Headers'] = 'Content-Type'
    return response


@app.errorhandler(400)
def bad_request(error):
    return error_response('Bad request', str(error.description), 400)


@app.errorhandler(404)
def not_found(error):
    return error_response('Not found', str(error.description), 404)


@app.errorhandler(413)
def too_large(error):
    return error_response('Upload too large', str(error.description), 413)


@app.errorhandler(500)
def internal_error(error):
    return error_response('Internal server error', str(error.description), 500)


@app.route('/api/config', methods=['GET'])
def get_config():
    """Get the active configuration."""
    return jsonify(get_config_summary(_config))


@app.route('/api/opcodes', methods=['GET'])
def get_opcodes():
    """List supported instructions and their bit layouts."""
    return jsonify({
        'opcodes': [
            {
                'opcode': int(fmt.opcode),
                'mnemonic': fmt.mnemonic,
                'description': fmt.description,
                'fields': [
                    {
                        'name': f.name,
                        'kind': f.kind.name.lower(),
                        'shift': f.shift,
                        'width': f.width,
                    }
                    for f in fmt.fields
                ],
            }
            for fmt in FORMATS.values()
        ]
    })


@app.route('/api/assemble', methods=['POST', 'OPTIONS'])
def assemble_upload():
    """Upload a CSV source and assemble it."""
    if request.method == 'OPTIONS':
        return '', 204

    file_error = require_file_upload()
    if file_error:
        return file_error

    file = request.files['file']
    try:
        source = file.read().decode('utf-8')
    except UnicodeDecodeError:
        return error_response('Invalid source file', 'Source must be UTF-8 text')

    asm = Assembler(hex_byte_order=_config['hex_byte_order'])
    try:
        image = asm.assemble_string(source)
    except AssemblerError as e:
        return assembler_error_response('Assembly failed', e)

    return jsonify({
        'success': True,
        'filename': secure_filename(file.filename),
        'instructions': len(asm.words),
        'size': len(image),
        'image': image.hex(),
        'records': [r.to_dict() for r in asm.get_diagnostics()],
    })


@app.route('/api/inspect', methods=['POST', 'OPTIONS'])
def inspect_upload():
    """Upload a binary image and decode its records."""
    if request.method == 'OPTIONS':
        return '', 204

    file_error = require_file_upload()
    if file_error:
        return file_error

    file = request.files['file']
    data = file.read()
    try:
        records = inspect_image(data, _config['hex_byte_order'])
    except AssemblerError as e:
        return assembler_error_response('Invalid image', e)

    return jsonify({
        'filename': secure_filename(file.filename),
        'size': len(data),
        'count': len(records),
        'records': [r.to_dict() for r in records],
    })


def main():
    try:
        configure(load_config(os.environ.get('QUARK_CONFIG')))
    except ConfigError as e:
        raise SystemExit(f"Error: {e}")

    # Get port from environment or default to 5050 (5000 is often used by macOS AirPlay)
    port = int(os.environ.get('PORT', 5050))
    debug = os.environ.get('FLASK_DEBUG', 'false').lower() == 'true'

    print(f"Starting Quark inspection server on port {port}")
    print(f"Debug mode: {debug}")

    app.run(host='0.0.0.0', port=port, debug=debug)


if __name__ == '__main__':
    main()
