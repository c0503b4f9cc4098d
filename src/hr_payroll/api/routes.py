import logging
import uuid
from pathlib import Path
from typing import Optional

from flask import Flask, jsonify, request, send_file

from ..config.settings import DEBUG, OUTPUT_DIR, SECRET_KEY
from ..database.serialization import changes_from_json, from_json, to_json
from ..errors import InvalidInput, InvalidOperation, InvalidTransition, NotFound, PayrollError
from ..main import build_store
from ..models.employee import Employee
from ..models.notification import NotificationStatus
from ..models.payroll import PayrollSettings, PayrollStatus
from ..processors.department_summary import summarize_payroll
from ..processors.payroll_register_generator import PayrollRegisterGenerator
from ..store import StateStore
from ..store import intents

logger = logging.getLogger(__name__)

# No authentication: actions are recorded against this actor unless one is supplied
DEFAULT_ACTOR = "admin"


def _payload() -> dict:
    return request.get_json(silent=True) or {}


def _int_field(data: dict, key: str) -> int:
    try:
        return int(data[key])
    except (KeyError, TypeError, ValueError):
        raise InvalidInput(f"'{key}' must be an integer")


def _actor(data: dict) -> str:
    return str(data.get('actor_id') or request.headers.get('X-Actor-Id') or DEFAULT_ACTOR)


def _status_code(error: PayrollError) -> int:
    if isinstance(error, NotFound):
        return 404
    if isinstance(error, (InvalidTransition, InvalidOperation)):
        return 409
    return 400


def create_app(store: Optional[StateStore] = None, output_dir: Optional[Path] = None) -> Flask:
    app = Flask(__name__)
    app.config['SECRET_KEY'] = SECRET_KEY
    app.config['DEBUG'] = DEBUG

    if store is None:
        store = build_store()
    export_dir = Path(output_dir) if output_dir else OUTPUT_DIR / "payroll"
    app.extensions['state_store'] = store

    def respond(intent, message: str, status: int = 200, **extra):
        store.dispatch(intent)
        logger.info(message)
        body = {'success': True, 'message': message}
        body.update(extra)
        return jsonify(body), status

    @app.errorhandler(PayrollError)
    def handle_payroll_error(error: PayrollError):
        logger.warning("Rejected request %s %s: %s", request.method, request.path, error)
        return jsonify({
            'success': False,
            'error': type(error).__name__,
            'message': str(error)
        }), _status_code(error)

    # ============================================================================
    # State
    # ============================================================================

    @app.route('/api/state')
    def get_state():
        """Full snapshot"""
        return jsonify(to_json(store.visible_state()))

    # ============================================================================
    # Employees
    # ============================================================================

    @app.route('/api/employees')
    def get_employees():
        """Get list of employees"""
        return jsonify(to_json(store.state.employees))

    @app.route('/api/employees', methods=['POST'])
    def add_employee():
        employee = from_json(Employee, _payload())
        return respond(intents.AddEmployee(employee), f'Employee {employee.name} added', 201,
                       employee_id=employee.id)

    @app.route('/api/employees/<employee_id>', methods=['PATCH'])
    def update_employee(employee_id):
        changes = changes_from_json(Employee, _payload())
        return respond(intents.UpdateEmployee(employee_id, changes), f'Employee {employee_id} updated')

    @app.route('/api/employees/<employee_id>', methods=['DELETE'])
    def delete_employee(employee_id):
        return respond(intents.DeleteEmployee(employee_id), f'Employee {employee_id} deleted')

    # ============================================================================
    # Settings
    # ============================================================================

    @app.route('/api/settings')
    def get_settings():
        return jsonify(to_json(store.state.settings))

    @app.route('/api/settings', methods=['PATCH'])
    def update_settings():
        changes = changes_from_json(PayrollSettings, _payload())
        return respond(intents.UpdateSettings(changes), 'Payroll settings updated')

    # ============================================================================
    # Payroll
    # ============================================================================

    @app.route('/api/payroll')
    def get_payroll_records():
        """Payroll records, optionally filtered by year, month and status"""
        records = store.state.payroll_records
        year = request.args.get('year', type=int)
        month = request.args.get('month', type=int)
        status = request.args.get('status')
        if year:
            records = [r for r in records if r.year == year]
        if month:
            records = [r for r in records if r.month == month]
        if status:
            records = [r for r in records if PayrollStatus(r.status).value == status]
        return jsonify(to_json(list(records)))

    @app.route('/api/payroll/generate', methods=['POST'])
    def generate_payroll():
        data = _payload()
        year = _int_field(data, 'year')
        month = _int_field(data, 'month')
        employee_ids = data.get('employee_ids')
        intent = intents.GeneratePayroll(month, year, tuple(employee_ids) if employee_ids else None)

        previous, snapshot = store.transition(intent)
        generated = snapshot.payroll_records[len(previous.payroll_records):]
        logger.info("Generated %d payroll records for %d-%02d", len(generated), year, month)
        return jsonify({
            'success': True,
            'message': f'Generated {len(generated)} payroll records',
            'records': [r.id for r in generated]
        }), 201

    @app.route('/api/payroll/<record_id>/process', methods=['POST'])
    def process_payroll(record_id):
        intent = intents.ProcessPayroll(record_id, _actor(_payload()))
        return respond(intent, f'Payroll record {record_id} processed')

    @app.route('/api/payroll/<record_id>/pay', methods=['POST'])
    def pay_payroll(record_id):
        intent = intents.MarkPayrollPaid(record_id, _actor(_payload()))
        return respond(intent, f'Payroll record {record_id} paid')

    @app.route('/api/payroll/summary')
    def payroll_summary():
        year = request.args.get('year', type=int)
        month = request.args.get('month', type=int)
        records = [
            r for r in store.state.payroll_records
            if (not year or r.year == year) and (not month or r.month == month)
        ]
        return jsonify(to_json(summarize_payroll(records)))

    @app.route('/api/payroll/export', methods=['POST'])
    def export_payroll():
        """Generate the payroll register workbook for a month"""
        data = _payload()
        year = _int_field(data, 'year')
        month = _int_field(data, 'month')
        generator = PayrollRegisterGenerator(export_dir)
        filepath = generator.generate(list(store.state.payroll_records), year, month)
        return jsonify({
            'success': True,
            'message': 'Payroll register generated successfully',
            'file': Path(filepath).name
        })

    @app.route('/api/download/<path:filename>')
    def download_file(filename):
        """Download a generated file"""
        filepath = export_dir / Path(filename).name
        if filepath.exists():
            return send_file(filepath, as_attachment=True)
        return jsonify({'success': False, 'message': 'File not found'}), 404

    # ============================================================================
    # Advances
    # ============================================================================

    @app.route('/api/advances')
    def get_advances():
        state = store.state
        return jsonify([
            dict(to_json(advance), installments=to_json(state.installments_of(advance.id)))
            for advance in state.advances
        ])

    @app.route('/api/advances', methods=['POST'])
    def request_advance():
        data = _payload()
        if 'amount' not in data:
            raise InvalidInput("'amount' is required")
        intent = intents.RequestAdvance(
            employee_id=str(data.get('employee_id') or ''),
            amount=data['amount'],
            reason=str(data.get('reason') or ''),
            installments_count=_int_field(data, 'installments_count'),
            notes=data.get('notes'),
            advance_id=uuid.uuid4().hex,
        )
        snapshot = store.dispatch(intent)
        advance = next(a for a in snapshot.advances if a.id == intent.advance_id)
        logger.info("Advance %s requested for employee %s", advance.id, advance.employee_id)
        return jsonify({
            'success': True,
            'message': 'Advance requested',
            'advance': to_json(advance),
            'installments': to_json(snapshot.installments_of(advance.id))
        }), 201

    @app.route('/api/advances/<advance_id>/approve', methods=['POST'])
    def approve_advance(advance_id):
        intent = intents.ApproveAdvance(advance_id, _actor(_payload()))
        return respond(intent, f'Advance {advance_id} approved')

    @app.route('/api/advances/<advance_id>/reject', methods=['POST'])
    def reject_advance(advance_id):
        intent = intents.RejectAdvance(advance_id, _actor(_payload()))
        return respond(intent, f'Advance {advance_id} rejected')

    @app.route('/api/advances/<advance_id>', methods=['DELETE'])
    def delete_advance(advance_id):
        return respond(intents.DeleteAdvance(advance_id), f'Advance {advance_id} deleted')

    @app.route('/api/installments/<installment_id>/pay', methods=['POST'])
    def pay_installment(installment_id):
        data = _payload()
        if 'amount' not in data:
            raise InvalidInput("'amount' is required")
        intent = intents.PayInstallment(installment_id, data['amount'])
        return respond(intent, f'Payment recorded for installment {installment_id}')

    @app.route('/api/advances/refresh', methods=['POST'])
    def refresh_advances():
        """Flag overdue installments and prune old notifications"""
        store.tick()
        return jsonify({'success': True, 'message': 'Advances refreshed'})

    # ============================================================================
    # Notifications
    # ============================================================================

    @app.route('/api/notifications')
    def get_notifications():
        notifications = store.visible_state().notifications
        status = request.args.get('status')
        if status:
            notifications = [n for n in notifications if NotificationStatus(n.status).value == status]
        return jsonify(to_json(list(notifications)))

    @app.route('/api/notifications/<notification_id>/read', methods=['POST'])
    def mark_notification_read(notification_id):
        return respond(intents.MarkNotificationRead(notification_id), 'Notification marked as read')

    @app.route('/api/notifications/read-all', methods=['POST'])
    def mark_all_notifications_read():
        return respond(intents.MarkAllNotificationsRead(), 'All notifications marked as read')

    @app.route('/api/notifications/prune', methods=['POST'])
    def prune_notifications():
        return respond(intents.PruneNotifications(), 'Old notifications pruned')

    @app.route('/api/notifications', methods=['DELETE'])
    def clear_notifications():
        return respond(intents.ClearNotifications(), 'Notifications cleared')

    return app
