"""The payment service: payment creation and the order-created event consumer."""