"""Test the HTTP API."""
from geoattend import db
from geoattend.models.attendance import AttendanceRecord
from geoattend.models.attendance_session import AttendanceSession
from geoattend.models.audit_log import AuditLog


def submission_body(session, matric_no='CSC/2021/001', fingerprint='fp-device-A', **overrides):
    body = {
        'matric_no': matric_no,
        'session_code': session.session_code,
        'lat': session.lat,
        'lng': session.lng,
        'accuracy': 10,
        'device_info': {'device_fingerprint': fingerprint, 'platform': 'Android'},
    }
    body.update(overrides)
    return body


def test_health_endpoints(client):
    assert client.get('/health').get_json()['status'] == 'healthy'
    assert client.get('/api/auth/health').status_code == 200
    assert client.get('/api/attendance/health').status_code == 200


class TestAuth:

    def test_login(self, client, teacher):
        response = client.post('/api/auth/login', json={
            'email': 'Lecturer@University.edu', 'password': 'teacher123'
        })

        assert response.status_code == 200
        data = response.get_json()['data']
        assert data['access_token']
        assert data['teacher']['email'] == 'lecturer@university.edu'
        assert 'password_hash' not in data['teacher']

    def test_login_wrong_password(self, client, teacher):
        response = client.post('/api/auth/login', json={
            'email': 'lecturer@university.edu', 'password': 'nope'
        })
        assert response.status_code == 401
        assert response.get_json()['message'] == 'Invalid email or password'

    def test_login_requires_json(self, client):
        response = client.post('/api/auth/login', data='x', content_type='text/plain')
        assert response.status_code == 400

    def test_token_grants_access(self, client, teacher, course):
        token = client.post('/api/auth/login', json={
            'email': 'lecturer@university.edu', 'password': 'teacher123'
        }).get_json()['data']['access_token']

        response = client.get(
            f'/api/sessions/course/{course.id}',
            headers={'Authorization': f'Bearer {token}'}
        )
        assert response.status_code == 200


class TestSessionsApi:

    def test_requires_token(self, client, course):
        response = client.post(f'/api/sessions/course/{course.id}', json={'lat': 6.5, 'lng': 3.3})
        assert response.status_code == 401
        assert response.get_json()['message'] == 'Authorization token required'

    def test_start_session(self, client, frozen_clock, teacher, course, auth_headers):
        response = client.post(
            f'/api/sessions/course/{course.id}',
            json={'lat': 6.5244, 'lng': 3.3792, 'radius_m': 75, 'duration_minutes': 20},
            headers=auth_headers(teacher)
        )

        assert response.status_code == 201
        session = response.get_json()['data']['session']
        assert len(session['session_code']) == 4
        assert session['radius_meters'] == 75
        assert session['duration_minutes'] == 20
        assert session['state'] == 'active'
        assert 'nonce' not in session

        log = AuditLog.query.filter_by(action='session_started').one()
        assert log.actor_id == teacher.id
        assert log.payload['body']['radius_m'] == 75

    def test_failed_audit_write_does_not_fail_request(
        self, client, monkeypatch, frozen_clock, teacher, course, auth_headers
    ):
        def broken_record(*args, **kwargs):
            raise RuntimeError('audit store unavailable')

        monkeypatch.setattr(AuditLog, 'record', broken_record)

        response = client.post(
            f'/api/sessions/course/{course.id}',
            json={'lat': 6.5244, 'lng': 3.3792},
            headers=auth_headers(teacher)
        )

        assert response.status_code == 201
        session_id = response.get_json()['data']['session']['id']
        assert db.session.get(AttendanceSession, session_id).is_active
        assert AuditLog.query.count() == 0

    def test_start_session_defaults(self, client, frozen_clock, teacher, course, auth_headers):
        response = client.post(
            f'/api/sessions/course/{course.id}',
            json={'lat': 6.5244, 'lng': 3.3792},
            headers=auth_headers(teacher)
        )

        session = response.get_json()['data']['session']
        assert session['radius_meters'] == 100
        assert session['duration_minutes'] == 60

    def test_start_session_invalid_body(self, client, teacher, course, auth_headers):
        response = client.post(
            f'/api/sessions/course/{course.id}',
            json={'lat': 91, 'lng': 3.3792, 'radius_m': 5},
            headers=auth_headers(teacher)
        )

        body = response.get_json()
        assert response.status_code == 400
        assert body['code'] == 'INVALID_INPUT'
        assert len(body['details']) == 2
        assert AuditLog.query.count() == 0

    def test_start_session_conflict(self, client, frozen_clock, teacher, course, auth_headers, make_session):
        active = make_session(course)

        response = client.post(
            f'/api/sessions/course/{course.id}',
            json={'lat': 6.5244, 'lng': 3.3792},
            headers=auth_headers(teacher)
        )

        body = response.get_json()
        assert response.status_code == 400
        assert body['code'] == 'ACTIVE_SESSION_EXISTS'
        assert body['active_session']['session_code'] == active.session_code

    def test_start_session_without_free_code(
        self, app, client, monkeypatch, frozen_clock, teacher, course, make_course, auth_headers, make_session
    ):
        app.config['SESSION_CODE_MAX_ATTEMPTS'] = 2
        monkeypatch.setattr(AttendanceSession, 'generate_code', staticmethod(lambda: '4821'))
        make_session(make_course(teacher, course_code='CS201', title='Data Structures'))

        response = client.post(
            f'/api/sessions/course/{course.id}',
            json={'lat': 6.5244, 'lng': 3.3792},
            headers=auth_headers(teacher)
        )

        assert response.status_code == 503
        assert response.get_json()['code'] == 'SESSION_CODE_UNAVAILABLE'

    def test_foreign_course_is_not_found(self, client, make_teacher, course, auth_headers):
        stranger = make_teacher(name='Dr. Other', email='other@university.edu')

        response = client.post(
            f'/api/sessions/course/{course.id}',
            json={'lat': 6.5244, 'lng': 3.3792},
            headers=auth_headers(stranger)
        )
        assert response.status_code == 404
        assert response.get_json()['code'] == 'NOT_FOUND'

    def test_list_sessions(self, client, frozen_clock, teacher, course, auth_headers, make_session):
        make_session(course)

        response = client.get(
            f'/api/sessions/course/{course.id}?status=active', headers=auth_headers(teacher)
        )

        data = response.get_json()['data']
        assert data['course']['course_code'] == 'CS103'
        assert len(data['sessions']) == 1

    def test_list_sessions_bad_status(self, client, teacher, course, auth_headers):
        response = client.get(
            f'/api/sessions/course/{course.id}?status=soon', headers=auth_headers(teacher)
        )
        assert response.status_code == 400

    def test_session_detail(self, client, frozen_clock, teacher, course, student, auth_headers, make_session):
        session = make_session(course)
        client.post('/api/attendance/submit', json=submission_body(session))

        response = client.get(f'/api/sessions/{session.id}', headers=auth_headers(teacher))

        data = response.get_json()['data']
        assert data['statistics']['total_submissions'] == 1
        assert data['statistics']['present_count'] == 1
        assert data['statistics']['attendance_rate'] == 100
        assert data['attendance'][0]['student']['matric_no'] == 'CSC/2021/001'

    def test_end_session(self, client, frozen_clock, teacher, course, auth_headers, make_session):
        session = make_session(course)
        frozen_clock.advance(minutes=15)

        response = client.patch(f'/api/sessions/{session.id}/end', headers=auth_headers(teacher))

        assert response.status_code == 200
        assert response.get_json()['data']['session']['state'] == 'ended'
        assert AuditLog.query.filter_by(action='session_ended').count() == 1

        again = client.patch(f'/api/sessions/{session.id}/end', headers=auth_headers(teacher))
        assert again.status_code == 400
        assert again.get_json()['code'] == 'SESSION_ALREADY_EXPIRED'
        assert AuditLog.query.filter_by(action='session_ended').count() == 1

    def test_live_view(self, client, frozen_clock, teacher, course, student, auth_headers, make_session):
        session = make_session(course)
        client.post('/api/attendance/submit', json=submission_body(session))
        frozen_clock.advance(seconds=10)

        data = client.get(
            f'/api/sessions/{session.id}/live', headers=auth_headers(teacher)
        ).get_json()['data']

        assert data['session_info']['is_active'] is True
        assert len(data['recent_submissions']) == 1
        assert data['live_stats']['present_count'] == 1

        frozen_clock.advance(minutes=1)
        data = client.get(
            f'/api/sessions/{session.id}/live', headers=auth_headers(teacher)
        ).get_json()['data']
        assert data['recent_submissions'] == []
        assert data['live_stats']['total_submissions'] == 1

    def test_manual_attendance(self, client, frozen_clock, teacher, course, student, auth_headers, make_session):
        session = make_session(course)

        response = client.post(
            f'/api/sessions/{session.id}/manual-attendance',
            json={'matric_no': 'csc/2021/001', 'reason': 'Phone battery died'},
            headers=auth_headers(teacher)
        )

        assert response.status_code == 201
        record = response.get_json()['data']['record']
        assert record['status'] == 'manual_present'
        assert record['reason'] == 'Phone battery died'
        assert AuditLog.query.filter_by(action='manual_attendance').count() == 1

        duplicate = client.post(
            f'/api/sessions/{session.id}/manual-attendance',
            json={'matric_no': 'CSC/2021/001'},
            headers=auth_headers(teacher)
        )
        assert duplicate.get_json()['code'] == 'ALREADY_SUBMITTED'


class TestSubmitApi:

    def test_submit(self, client, frozen_clock, course, student, make_session):
        session = make_session(course)

        response = client.post(
            '/api/attendance/submit',
            json=submission_body(session),
            headers={'User-Agent': 'pytest-browser'}
        )

        assert response.status_code == 201
        body = response.get_json()
        assert body['data']['success'] is True
        assert body['data']['record']['matric_no'] == 'CSC/2021/001'
        assert body['data']['record']['receipt_signature']
        assert all(body['data']['validation_passed'].values())

    def test_submit_invalid_input(self, client, frozen_clock, course, student, make_session):
        session = make_session(course)

        response = client.post('/api/attendance/submit', json=submission_body(
            session, session_code='12a4', lat='north', device_info={'gpu': 'x'}
        ))

        body = response.get_json()
        assert response.status_code == 400
        assert body['code'] == 'INVALID_INPUT'
        assert 'Session code must be exactly 4 digits' in body['details']
        assert 'Invalid device_info fields: gpu' in body['details']
        assert AttendanceRecord.query.count() == 0

    def test_submit_not_json(self, client):
        response = client.post('/api/attendance/submit', data='hello', content_type='text/plain')
        assert response.get_json()['code'] == 'INVALID_INPUT'

    def test_submit_unknown_session(self, client, frozen_clock, course, student, make_session):
        session = make_session(course)
        code = '1000' if session.session_code != '1000' else '1001'

        response = client.post('/api/attendance/submit', json=submission_body(session, session_code=code))

        body = response.get_json()
        assert response.status_code == 404
        assert body['code'] == 'SESSION_NOT_FOUND'
        assert body['details']

    def test_submit_not_enrolled(self, client, frozen_clock, course, make_student, make_session):
        make_student('CSC/2021/050', 'Kemi Adeyemi')
        session = make_session(course)

        response = client.post(
            '/api/attendance/submit', json=submission_body(session, matric_no='CSC/2021/050')
        )

        assert response.status_code == 403
        assert response.get_json()['course_info']['lecturer'] == 'Dr. Adaeze Okafor'

    def test_submit_out_of_range(self, client, frozen_clock, course, student, make_session, north_of):
        session = make_session(course)

        response = client.post(
            '/api/attendance/submit',
            json=submission_body(session, lat=north_of(session.lat, 500))
        )

        body = response.get_json()
        assert body['code'] == 'OUT_OF_RANGE'
        assert body['location_info']['actual_distance'] == 500

    def test_receipt_verification(self, client, frozen_clock, course, student, make_session):
        session = make_session(course)
        receipt = client.post(
            '/api/attendance/submit', json=submission_body(session)
        ).get_json()['data']['record']['receipt_signature']

        ok = client.post('/api/attendance/receipts/verify', json={
            'session_id': session.id, 'matric_no': 'CSC/2021/001', 'receipt': receipt
        }).get_json()['data']
        forged = client.post('/api/attendance/receipts/verify', json={
            'session_id': session.id, 'matric_no': 'CSC/2021/001', 'receipt': 'f' * 64
        }).get_json()['data']

        assert ok['valid'] is True
        assert ok['status'] == 'present'
        assert forged == {'valid': False}

    def test_receipt_verification_requires_fields(self, client):
        response = client.post('/api/attendance/receipts/verify', json={'session_id': 'x'})

        assert response.status_code == 400
        assert len(response.get_json()['details']) == 3



class TestLectureScenarios:
    """One session at the CS103 lecture hall, driven over HTTP."""

    def test_check_in_then_duplicate_then_shared_device_then_far_away(
        self, client, frozen_clock, course, make_student, make_session, north_of
    ):
        make_student('CSC/2021/001', 'Tunde Bakare', course=course)
        make_student('CSC/2021/002', 'Ngozi Eze', course=course)
        make_student('CSC/2021/003', 'Ibrahim Musa', course=course)
        session = make_session(course, lat=6.5244, lng=3.3792, radius_m=100, duration_minutes=60)

        accepted = client.post('/api/attendance/submit', json=submission_body(session))
        assert accepted.status_code == 201
        record = accepted.get_json()['data']['record']
        assert record['status'] == 'present'
        assert record['receipt_signature']

        frozen_clock.advance(minutes=2)
        duplicate = client.post('/api/attendance/submit', json=submission_body(
            session, fingerprint='fp-device-Z', lat=6.5245, lng=3.3793
        ))
        body = duplicate.get_json()
        assert duplicate.status_code == 400
        assert body['code'] == 'ALREADY_SUBMITTED'
        assert body['existing_record']['status'] == 'present'
        assert body['existing_record']['submitted_at'] == record['submitted_at']

        shared = client.post('/api/attendance/submit', json=submission_body(
            session, matric_no='CSC/2021/002'
        ))
        body = shared.get_json()
        assert shared.status_code == 400
        assert body['code'] == 'DEVICE_ALREADY_USED'
        assert body['security_info']['previous_user'] == 'Tunde Bakare'
        assert body['security_info']['previous_matric'] == 'CSC/2021/001'

        far = client.post('/api/attendance/submit', json=submission_body(
            session, matric_no='CSC/2021/003', fingerprint='fp-device-C',
            lat=north_of(6.5244, 500)
        ))
        body = far.get_json()
        assert far.status_code == 400
        assert body['code'] == 'OUT_OF_RANGE'
        assert body['location_info']['actual_distance'] == 500
        assert body['location_info']['required_radius'] == 100
        assert AttendanceRecord.query.filter_by(
            session_id=session.id, matric_no_submitted='CSC/2021/003'
        ).count() == 0
