"""Application entry point."""
import os
import click
from flask.cli import with_appcontext
from dotenv import load_dotenv
from edutrack import create_app, db

# Load environment variables
load_dotenv()

# Create Flask app
app = create_app(os.getenv('FLASK_ENV', 'development'))

@app.cli.command()
@with_appcontext
def reset_db():
    """Drop and recreate all tables, optionally with demo data."""
    if click.confirm('This will delete all data and recreate tables. Continue?'):
        db.drop_all()
        db.create_all()
        click.echo('Database reset complete!')

        if click.confirm('Seed with demo data?'):
            from edutrack.services.seed_service import SeedService
            SeedService(db.session).seed_all()
            click.echo('Database seeded successfully!')

if __name__ == '__main__':
    # Development server
    port = int(os.environ.get('PORT', 5000))
    host = os.environ.get('HOST', '127.0.0.1')
    debug = os.environ.get('FLASK_ENV') == 'development'

    app.run(host=host, port=port, debug=debug)
