from docdesk.models import DocItem, DELIVERY
from docdesk.services import document_service, settings_service


def test_system_init_is_idempotent(app, db_session):
    runner = app.test_cli_runner()

    result = runner.invoke(args=["system", "init"])
    assert result.exit_code == 0, result.output
    assert "PASS Tables ready" in result.output
    assert "Next quote: 1" in result.output

    settings_service.update_settings({"next_quote_number": 9})
    result = runner.invoke(args=["system", "init"])
    assert result.exit_code == 0, result.output
    assert "Next quote: 9" in result.output


def test_products_low_stock(app, cement, rebar):
    runner = app.test_cli_runner()

    result = runner.invoke(args=["products", "low-stock"])

    assert result.exit_code == 0, result.output
    assert "REB-12" in result.output
    assert "CEM-42" not in result.output


def test_documents_list(app, cement):
    runner = app.test_cli_runner()
    assert "No documents found." in runner.invoke(args=["documents", "list"]).output

    draft = document_service.new_draft(DELIVERY)
    draft.client_name = "Acme"
    draft.tax_rate = 0
    draft.items = [DocItem(row_id="r1", product_id=cement.id, quantity=2, unit_price_cents=1250)]
    document_service.save_document(draft)

    result = runner.invoke(args=["documents", "list", "--type", "delivery"])

    assert result.exit_code == 0, result.output
    assert "NE-000001" in result.output
    assert "$25.00" in result.output


def test_clients_list(app, acme):
    result = app.test_cli_runner().invoke(args=["clients", "list"])

    assert result.exit_code == 0, result.output
    assert "Acme Construcciones" in result.output
