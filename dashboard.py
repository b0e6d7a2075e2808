"""
Spending Review Dashboard

A Flask JSON service for importing bank statement CSV exports and reviewing
the results: categorized transactions, duplicate imports, detected
subscriptions, upcoming renewals and category suggestions.

Transactions and user settings are kept as JSON files under DATA_DIR.
"""

import logging
import os
import io
from collections import defaultdict
from dataclasses import asdict
from datetime import datetime
from typing import List, Dict, Any

from flask import Flask, request, jsonify, send_file
from werkzeug.utils import secure_filename

from spending_engine import run_import_pipeline
from spending_engine.config.categories import resolve_categories, is_valid_category_id
from spending_engine.config.settings_storage import SettingsStore
from spending_engine.greetings import SessionGreeting
from spending_engine.ingest.csv_parser import CSVParseError
from spending_engine.ingest.export import export_to_csv, export_to_json
from spending_engine.models import Transaction
from spending_engine.storage import TransactionStore
from spending_engine.subscriptions import (
    calculate_annual_projection,
    calculate_monthly_spend,
    calculate_subscription_analytics,
    detect_subscriptions,
    get_detection_explanation,
    get_upcoming_renewals,
)
from spending_engine.suggestions import generate_suggestions


app = Flask(__name__)
app.config['MAX_CONTENT_LENGTH'] = 50 * 1024 * 1024  # 50MB max upload
app.config['DATA_DIR'] = os.environ.get('SPENDING_ENGINE_DATA_DIR', '/tmp/spending_engine')

greeting = SessionGreeting()


def allowed_file(filename: str) -> bool:
    """Check if file extension is allowed."""
    return '.' in filename and filename.rsplit('.', 1)[1].lower() == 'csv'


def get_settings_store() -> SettingsStore:
    return SettingsStore(os.path.join(app.config['DATA_DIR'], 'settings.json'))


def get_transaction_store() -> TransactionStore:
    return TransactionStore(os.path.join(app.config['DATA_DIR'], 'transactions.json'))


def generate_summary(transactions: List[Transaction]) -> Dict[str, Any]:
    """
    Generate aggregate summary statistics for a set of transactions.

    Args:
        transactions: Categorized transactions

    Returns:
        Dictionary with summary statistics
    """
    summary = {
        'total_transactions': len(transactions),
        'total_amount': 0.0,
        'by_category': defaultdict(lambda: {'count': 0, 'total': 0.0}),
        'by_month': defaultdict(float),
        'uncategorized_count': 0,
        'uncategorized_transactions': [],
        'date_range': None,
    }

    for txn in transactions:
        summary['total_amount'] += txn.amount
        summary['by_category'][txn.category]['count'] += 1
        summary['by_category'][txn.category]['total'] += txn.amount
        summary['by_month'][txn.date.strftime('%Y-%m')] += txn.amount

        # Track uncategorized transactions for review
        if txn.category == 'uncategorized':
            summary['uncategorized_count'] += 1
            summary['uncategorized_transactions'].append({
                'id': txn.id,
                'description': txn.description,
                'merchant': txn.merchant,
                'amount': txn.amount,
            })

    if transactions:
        dates = [txn.date for txn in transactions]
        summary['date_range'] = {
            'start': min(dates).isoformat(),
            'end': max(dates).isoformat(),
        }

    # Convert defaultdicts to regular dicts for JSON serialization
    summary['total_amount'] = round(summary['total_amount'], 2)
    summary['by_category'] = {
        category_id: {'count': data['count'], 'total': round(data['total'], 2)}
        for category_id, data in summary['by_category'].items()
    }
    summary['by_month'] = {month: round(total, 2) for month, total in sorted(summary['by_month'].items())}

    return summary


@app.route('/')
def index():
    """Service greeting and available endpoints."""
    settings = get_settings_store().load()
    response = {
        'service': 'spending-review',
        'endpoints': sorted(str(rule) for rule in app.url_map.iter_rules() if rule.endpoint != 'static'),
    }
    if settings.preferences.enable_greetings:
        response['greeting'] = greeting.get(settings.preferences.user_name)
    return jsonify(response)


@app.route('/upload', methods=['POST'])
def upload_files():
    """
    Import one or more statement CSV files.

    Accepts multipart uploads under 'files' or a raw CSV request body. New
    transactions are merged into the store; duplicates are reported but not stored.
    """
    sources = []
    if 'files' in request.files:
        files = request.files.getlist('files')
        if not files or all(f.filename == '' for f in files):
            return jsonify({'error': 'No files selected'}), 400
        sources = [(f.filename, f) for f in files]
    else:
        body = request.get_data()
        if not body:
            return jsonify({'error': 'No files provided'}), 400
        sources = [('request-body.csv', io.BytesIO(body))]

    settings_store = get_settings_store()
    transaction_store = get_transaction_store()
    settings = settings_store.load()
    existing = transaction_store.load() or []

    imported = []
    duplicates = []
    internal_duplicates = []
    file_summaries = []
    errors = []

    for name, stream in sources:
        filename = secure_filename(name) if name else 'upload.csv'
        if not allowed_file(filename):
            errors.append({
                'filename': filename,
                'error': 'Invalid file type. Only CSV files are allowed.'
            })
            continue

        try:
            content = stream.read().decode('utf-8-sig')
            result = run_import_pipeline(content, existing + imported, settings)
        except (UnicodeDecodeError, CSVParseError) as e:
            app.logger.warning(f"Upload: failed to parse {filename}: {e}")
            errors.append({'filename': filename, 'error': 'Failed to parse CSV'})
            continue

        imported.extend(result['transactions'])
        duplicates.extend(result['duplicates'])
        internal_duplicates.extend(result['internal_duplicates'])
        file_summaries.append({
            'filename': filename,
            'transaction_count': len(result['transactions']),
            'duplicate_count': len(result['duplicates']),
            'internal_duplicate_count': len(result['internal_duplicates']),
            'status': 'success',
        })

    if not file_summaries and errors:
        return jsonify({'error': 'Failed to parse CSV', 'details': errors}), 400

    transaction_store.merge(imported)
    settings_store.save(settings)
    app.logger.info(f"Upload: imported {len(imported)} transactions, {len(duplicates)} duplicates skipped")

    response = {
        'success': True,
        'files_processed': len(file_summaries),
        'file_summaries': file_summaries,
        'total_transactions': len(imported),
        'transactions': [txn.to_dict() for txn in imported],
        'duplicates': [
            {
                'new_transaction': d.new_transaction.to_dict(),
                'existing_transaction_id': d.existing_transaction.id,
                'confidence': d.confidence,
                'match_type': d.match_type,
            }
            for d in duplicates
        ],
        'internal_duplicates': [
            {
                'transaction1_id': d.transaction1.id,
                'transaction2_id': d.transaction2.id,
                'confidence': d.confidence,
                'match_type': d.match_type,
                'is_legitimate': d.is_legitimate,
            }
            for d in internal_duplicates
        ],
        'summary': generate_summary(imported),
        'errors': errors if errors else None,
    }

    return jsonify(response)


@app.route('/transactions', methods=['GET'])
def list_transactions():
    """Stored transactions, optionally filtered by ?category=<id>."""
    transactions = get_transaction_store().load() or []
    category = request.args.get('category')
    if category:
        transactions = [t for t in transactions if t.category == category]

    return jsonify({
        'transactions': [t.to_dict() for t in transactions],
        'summary': generate_summary(transactions),
    })


@app.route('/transactions/<transaction_id>/category', methods=['POST'])
def update_transaction_category(transaction_id: str):
    """
    Move a transaction to another category.

    Expects JSON body {"category_id": ...}. The merchant is learned as a
    pattern unless pattern learning is disabled.
    """
    data = request.get_json(silent=True) or {}
    category_id = data.get('category_id')
    if not category_id:
        return jsonify({'error': 'category_id is required'}), 400

    settings_store = get_settings_store()
    settings = settings_store.load()
    if not is_valid_category_id(category_id, settings):
        return jsonify({'error': f'Unknown category: {category_id}'}), 400

    transaction_store = get_transaction_store()
    transactions = transaction_store.load() or []
    txn = next((t for t in transactions if t.id == transaction_id), None)
    if txn is None:
        return jsonify({'error': 'Transaction not found'}), 404

    txn.category = category_id
    transaction_store.save(transactions)

    pattern = settings.learn_pattern(txn.merchant, category_id)
    if pattern:
        settings_store.save(settings)

    return jsonify({
        'transaction': txn.to_dict(),
        'learned_pattern': asdict(pattern) if pattern else None,
    })


@app.route('/subscriptions', methods=['GET'])
def list_subscriptions():
    """
    Run subscription detection over the stored history.

    Known services detected with high confidence are added to the tracked
    subscriptions; other recurring patterns are returned for confirmation.
    """
    try:
        settings_store = get_settings_store()
        settings = settings_store.load()
        transactions = get_transaction_store().load() or []

        result = detect_subscriptions(transactions, settings.subscriptions)
        settings_store.save(settings)

        tracked = settings.subscriptions.subscriptions
        return jsonify({
            'subscriptions': [
                dict(
                    sub.to_dict(),
                    analytics=calculate_subscription_analytics(sub, transactions).to_dict(),
                    explanation=get_detection_explanation(sub),
                )
                for sub in tracked
            ],
            'detected_patterns': [p.to_dict() for p in result.patterns],
            'monthly_spend': round(calculate_monthly_spend(tracked), 2),
            'annual_projection': round(calculate_annual_projection(tracked), 2),
        })
    except Exception as e:
        app.logger.error(f"Subscription detection error: {str(e)}", exc_info=True)
        return jsonify({'error': f'Failed to detect subscriptions: {str(e)}'}), 500


@app.route('/renewals', methods=['GET'])
def list_renewals():
    """Renewals expected within ?days=N (default 30)."""
    days = request.args.get('days', default=30, type=int)
    if days is None or days < 0:
        return jsonify({'error': 'days must be a non-negative integer'}), 400

    settings = get_settings_store().load()
    renewals = get_upcoming_renewals(settings.subscriptions.subscriptions, days)
    return jsonify({'renewals': [asdict(r) for r in renewals]})


@app.route('/suggestions', methods=['POST'])
def suggest_categories():
    """
    Suggest categories for a merchant.

    Expects JSON body {"merchant": ..., "amount": ...}.
    """
    data = request.get_json(silent=True) or {}
    merchant = data.get('merchant')
    if not merchant:
        return jsonify({'error': 'merchant is required'}), 400

    try:
        amount = float(data.get('amount', 0))
    except (TypeError, ValueError):
        return jsonify({'error': 'amount must be a number'}), 400

    settings = get_settings_store().load()
    transactions = get_transaction_store().load() or []
    suggestions = generate_suggestions(
        merchant,
        amount,
        transactions,
        settings.learned_patterns,
        settings.suggestion_settings,
    )
    return jsonify({'suggestions': [s.to_dict() for s in suggestions]})


@app.route('/categories', methods=['GET'])
def list_categories():
    settings = get_settings_store().load()
    return jsonify({
        'categories': [c.to_dict() for c in resolve_categories(settings).values()]
    })


@app.route('/export/csv', methods=['GET'])
def export_csv():
    """Export stored transactions to CSV format."""
    try:
        settings = get_settings_store().load()
        transactions = get_transaction_store().load() or []
        csv_data = export_to_csv(transactions, settings).encode('utf-8')

        # Generate filename with date
        filename = f"transactions-{datetime.now().strftime('%Y-%m-%d')}.csv"

        app.logger.info(f"CSV export: Successfully exported {len(transactions)} transactions")

        return send_file(
            io.BytesIO(csv_data),
            mimetype='text/csv',
            as_attachment=True,
            download_name=filename
        )
    except Exception as e:
        app.logger.error(f"CSV export error: {str(e)}", exc_info=True)
        return jsonify({'error': f'Failed to export CSV: {str(e)}'}), 500


@app.route('/export/json', methods=['GET'])
def export_json():
    """Export stored transactions to JSON format."""
    try:
        settings = get_settings_store().load()
        transactions = get_transaction_store().load() or []
        json_data = export_to_json(transactions, settings).encode('utf-8')

        filename = f"transactions-{datetime.now().strftime('%Y-%m-%d')}.json"

        app.logger.info(f"JSON export: Successfully exported {len(transactions)} transactions")

        return send_file(
            io.BytesIO(json_data),
            mimetype='application/json',
            as_attachment=True,
            download_name=filename
        )
    except Exception as e:
        app.logger.error(f"JSON export error: {str(e)}", exc_info=True)
        return jsonify({'error': f'Failed to export JSON: {str(e)}'}), 500


if __name__ == '__main__':
    logging.basicConfig(
        level=os.environ.get('SPENDING_ENGINE_LOG_LEVEL', 'INFO').upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    print("=" * 80)
    print("Spending Review Dashboard")
    print("=" * 80)
    print(f"\nStarting dashboard on http://localhost:5001 (data in {app.config['DATA_DIR']})")
    print("\nPress Ctrl+C to stop the server.")
    print("=" * 80)

    # Debug mode is controlled by environment variable for security
    # Set FLASK_DEBUG=1 only in development environments
    debug_mode = os.environ.get('FLASK_DEBUG', '0') == '1'
    if debug_mode:
        print("\nWARNING: Running in DEBUG mode. Not suitable for production!")
        print("=" * 80)

    app.run(debug=debug_mode, port=5001, host='0.0.0.0')
