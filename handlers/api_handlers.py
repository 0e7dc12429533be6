"""
API Route Handlers for RF Online.

Pure routing layer that delegates to the room coordinator and leaderboard,
plus the static client assets served from the same port.
"""

import logging
import os
from flask import jsonify, send_from_directory

logger = logging.getLogger(__name__)

def register_api_handlers(app, room_manager, static_dir=None):
    """
    Register all API route handlers.

    Args:
        app: Flask application instance
        room_manager: Room coordinator
        static_dir: Folder holding the browser client, or None to skip serving it
    """

    @app.route('/api/health')
    def health_check():
        """Health check endpoint."""
        return jsonify({
            'status': 'healthy',
            'message': 'RF Online server is running',
            'rooms': room_manager.get_status(),
            'connections': room_manager.connection_status()
        })

    @app.route('/api/rooms')
    def get_rooms():
        """Public rooms waiting for players."""
        return jsonify({'rooms': room_manager.room_list_payload()})

    @app.route('/api/leaderboard')
    def get_leaderboard():
        """Top of the online leaderboard."""
        return jsonify({
            'leaderboard': room_manager.leaderboard_payload()
        })

    if static_dir and os.path.isdir(static_dir):
        @app.route('/')
        def index():
            return send_from_directory(static_dir, 'index.html')

        @app.route('/<path:filename>')
        def static_files(filename):
            return send_from_directory(static_dir, filename)

    # Error handlers
    @app.errorhandler(404)
    def not_found(error):
        """Handle 404 errors."""
        return jsonify({'error': 'Not found'}), 404

    @app.errorhandler(500)
    def internal_error(error):
        """Handle 500 errors."""
        return jsonify({'error': 'Internal server error'}), 500

    logger.info("API handlers registered successfully")
