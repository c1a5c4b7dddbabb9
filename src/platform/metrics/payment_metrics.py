from prometheus_client import Counter, Histogram


class PaymentPipelineMetrics:
    """
    Payment pipeline metrics collector

    Tracks order creation, webhook transitions, voucher claims and ticket scans
    """

    def __init__(self):
        # ========== Order Metrics ==========
        self.orders_created = Counter(
            'orders_created_total',
            'Orders created with a PENDING payment',
            ['resource_type', 'has_voucher', 'has_seats'],
        )

        self.orders_failed = Counter(
            'orders_failed_total',
            'Order creation failures',
            ['reason'],  # validation/seat_unavailable/gateway
        )

        self.order_duration = Histogram(
            'order_creation_duration_seconds',
            'Order creation processing time',
            buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0],
        )

        self.compensations = Counter(
            'order_compensations_total',
            'Compensating actions run after a failed order step',
            ['action', 'result'],  # action: delete_payment/release_voucher
        )

        # ========== Webhook Metrics ==========
        self.webhook_events = Counter(
            'payment_webhook_events_total',
            'Gateway webhook events by outcome',
            ['event', 'result'],  # result: applied/noop/ignored/error
        )

        # ========== Voucher Metrics ==========
        self.voucher_claims = Counter(
            'voucher_claims_total',
            'Voucher claim attempts',
            ['result'],  # claimed/partial/exhausted
        )

        # ========== Ticket Metrics ==========
        self.ticket_scans = Counter(
            'ticket_scans_total',
            'Ticket verification attempts',
            ['result'],  # granted/already_scanned/rejected
        )

    # ========== Helper Methods ==========

    def record_order_created(self, *, resource_type: str, has_voucher: bool, has_seats: bool):
        self.orders_created.labels(
            resource_type=resource_type,
            has_voucher=str(has_voucher).lower(),
            has_seats=str(has_seats).lower(),
        ).inc()

    def record_order_failed(self, *, reason: str):
        self.orders_failed.labels(reason=reason).inc()

    def record_compensation(self, *, action: str, succeeded: bool):
        self.compensations.labels(action=action, result='ok' if succeeded else 'failed').inc()

    def record_webhook_event(self, *, event: str, result: str):
        self.webhook_events.labels(event=event, result=result).inc()

    def record_voucher_claim(self, *, result: str):
        self.voucher_claims.labels(result=result).inc()

    def record_ticket_scan(self, *, result: str):
        self.ticket_scans.labels(result=result).inc()


# Global metrics instance
metrics = PaymentPipelineMetrics()
