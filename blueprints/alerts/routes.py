from flask import current_app, request
from . import alerts_bp
from services.alert_service import AlertService
from utils.responses import api_success


@alerts_bp.route('/unsent', methods=['GET'])
def unsent():
    """Alerts waiting for delivery, newest first; optionally for one customer"""
    alerts = AlertService.get_unsent_alerts(request.args.get('cif_id') or None)
    return api_success([alert.to_dict() for alert in alerts])


@alerts_bp.route('/<int:alert_id>/sent', methods=['POST'])
def mark_sent(alert_id):
    """Record that an alert has been delivered"""
    current_app.logger.info(f'POST /api/v1/alerts/{alert_id}/sent')
    alert = AlertService.mark_alert_sent(alert_id)
    return api_success(alert.to_dict(), 'Alert marked as sent')
