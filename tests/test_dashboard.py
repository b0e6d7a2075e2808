"""
Tests for the Flask dashboard endpoints.
"""

import io
import json
import tempfile
import unittest

from dashboard import app


STATEMENT = "\n".join([
    "Fecha,Fecha de compra,Descripcion,Importe",
    "05 Jan 2026,04 Jan 2026,NETFLIX.COM 888-638-3549,219.00",
    "05 Feb 2026,04 Feb 2026,NETFLIX.COM 888-638-3549,219.00",
    "05 Mar 2026,04 Mar 2026,NETFLIX.COM 888-638-3549,219.00",
    "07 Mar 2026,07 Mar 2026,RANDOM SHOP XYZ,45.50",
]).encode("utf-8")


class DashboardTestCase(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        app.config['TESTING'] = True
        app.config['DATA_DIR'] = self.tmpdir.name
        self.client = app.test_client()

    def tearDown(self):
        self.tmpdir.cleanup()

    def upload(self, body=STATEMENT):
        return self.client.post('/upload', data=body, content_type='text/csv')


class TestUpload(DashboardTestCase):

    def test_raw_body_upload(self):
        response = self.upload()
        self.assertEqual(response.status_code, 200)
        data = response.get_json()
        self.assertTrue(data['success'])
        self.assertEqual(data['files_processed'], 1)
        self.assertEqual(data['total_transactions'], 4)
        self.assertEqual(data['summary']['by_category']['entertainment']['count'], 3)
        self.assertEqual(data['summary']['uncategorized_count'], 1)
        self.assertIsNone(data['errors'])

    def test_multipart_upload(self):
        response = self.client.post(
            '/upload',
            data={'files': (io.BytesIO(STATEMENT), 'statement.csv')},
            content_type='multipart/form-data',
        )
        self.assertEqual(response.status_code, 200)
        data = response.get_json()
        self.assertEqual(data['file_summaries'][0]['filename'], 'statement.csv')
        self.assertEqual(data['file_summaries'][0]['transaction_count'], 4)

    def test_wrong_extension_rejected(self):
        response = self.client.post(
            '/upload',
            data={'files': (io.BytesIO(STATEMENT), 'statement.txt')},
            content_type='multipart/form-data',
        )
        self.assertEqual(response.status_code, 400)
        data = response.get_json()
        self.assertEqual(data['error'], 'Failed to parse CSV')
        self.assertEqual(data['details'][0]['filename'], 'statement.txt')

    def test_empty_body_rejected(self):
        response = self.client.post('/upload', data=b'', content_type='text/csv')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['error'], 'No files provided')

    def test_undecodable_body_rejected(self):
        response = self.upload(b'\xff\xfe\x00bad')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['error'], 'Failed to parse CSV')

    def test_reupload_reports_duplicates(self):
        self.upload()
        data = self.upload().get_json()
        self.assertEqual(data['total_transactions'], 0)
        self.assertEqual(len(data['duplicates']), 4)
        self.assertEqual({d['match_type'] for d in data['duplicates']}, {'exact'})

        stored = self.client.get('/transactions').get_json()
        self.assertEqual(len(stored['transactions']), 4)


class TestTransactions(DashboardTestCase):

    def test_filter_by_category(self):
        self.upload()
        data = self.client.get('/transactions?category=entertainment').get_json()
        self.assertEqual(len(data['transactions']), 3)
        self.assertEqual(data['summary']['total_amount'], 657.0)

    def test_update_category_learns_pattern(self):
        self.upload()
        transactions = self.client.get('/transactions?category=uncategorized').get_json()['transactions']
        txn_id = transactions[0]['id']

        response = self.client.post(
            f'/transactions/{txn_id}/category', json={'category_id': 'personal'}
        )
        self.assertEqual(response.status_code, 200)
        data = response.get_json()
        self.assertEqual(data['transaction']['category'], 'personal')
        self.assertEqual(data['learned_pattern']['merchant_pattern'], 'RANDOM SHOP XYZ')
        self.assertAlmostEqual(data['learned_pattern']['confidence'], 0.6)

        personal = self.client.get('/transactions?category=personal').get_json()
        self.assertEqual([t['id'] for t in personal['transactions']], [txn_id])

    def test_update_category_errors(self):
        self.upload()
        txn_id = self.client.get('/transactions').get_json()['transactions'][0]['id']

        missing = self.client.post(f'/transactions/{txn_id}/category', json={})
        self.assertEqual(missing.status_code, 400)

        unknown = self.client.post(f'/transactions/{txn_id}/category', json={'category_id': 'nope'})
        self.assertEqual(unknown.status_code, 400)

        not_found = self.client.post('/transactions/missing/category', json={'category_id': 'personal'})
        self.assertEqual(not_found.status_code, 404)


class TestReviewEndpoints(DashboardTestCase):

    def test_index_greets(self):
        data = self.client.get('/').get_json()
        self.assertEqual(data['service'], 'spending-review')
        self.assertIn('/upload', data['endpoints'])
        self.assertIn('greeting', data)

    def test_categories(self):
        data = self.client.get('/categories').get_json()
        self.assertEqual(len(data['categories']), 11)

    def test_subscriptions(self):
        self.upload()
        data = self.client.get('/subscriptions').get_json()
        self.assertEqual(len(data['subscriptions']), 1)
        subscription = data['subscriptions'][0]
        self.assertEqual(subscription['known_service_id'], 'netflix')
        self.assertEqual(subscription['analytics']['charge_count'], 3)
        self.assertIn('Netflix', subscription['explanation'])
        self.assertEqual(data['monthly_spend'], 219.0)
        self.assertEqual(data['annual_projection'], 2628.0)

    def test_renewals(self):
        self.assertEqual(self.client.get('/renewals').get_json(), {'renewals': []})
        self.assertEqual(self.client.get('/renewals?days=-1').status_code, 400)

    def test_suggestions(self):
        self.upload()
        response = self.client.post('/suggestions', json={'merchant': 'NETFLIX', 'amount': 219})
        self.assertEqual(response.status_code, 200)
        suggestions = response.get_json()['suggestions']
        self.assertEqual(suggestions[0]['category_id'], 'entertainment')

        self.assertEqual(self.client.post('/suggestions', json={}).status_code, 400)
        bad_amount = self.client.post('/suggestions', json={'merchant': 'X', 'amount': 'lots'})
        self.assertEqual(bad_amount.status_code, 400)

    def test_export_csv(self):
        self.upload()
        response = self.client.get('/export/csv')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.mimetype, 'text/csv')
        self.assertIn('attachment', response.headers['Content-Disposition'])
        lines = response.data.decode('utf-8').splitlines()
        self.assertEqual(len(lines), 5)

    def test_export_json(self):
        self.upload()
        response = self.client.get('/export/json')
        self.assertEqual(response.mimetype, 'application/json')
        records = json.loads(response.data)
        self.assertEqual(len(records), 4)
        self.assertEqual(records[0]['category_name'], 'Uncategorized')


if __name__ == '__main__':
    unittest.main()
