def add_security_headers(response):
    """Add security headers to response"""
    # Content Security Policy
    response.headers['Content-Security-Policy'] = (
        "default-src 'self'; "
        "style-src 'self' 'unsafe-inline'; "
        "img-src 'self' data:; "
        "form-action 'self'; "
        "frame-ancestors 'self'"
    )

    # Other security headers
    response.headers['X-Frame-Options'] = 'SAMEORIGIN'
    response.headers['X-Content-Type-Options'] = 'nosniff'
    response.headers['Referrer-Policy'] = 'same-origin'

    # Fee data and exports must not be cached by browsers or proxies
    if response.mimetype.startswith('text/css') or response.mimetype.startswith('image/'):
        response.headers['Cache-Control'] = 'public, max-age=31536000'
    else:
        response.headers['Cache-Control'] = 'no-store, no-cache, must-revalidate, max-age=0'

    return response


def init_security(app):
    """Initialize security features for the Flask app"""
    if app.config.get('PREFERRED_URL_SCHEME') == 'https':
        app.config['SESSION_COOKIE_SECURE'] = True

    # Add security headers to all responses
    app.after_request(add_security_headers)
