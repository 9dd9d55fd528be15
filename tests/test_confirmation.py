from automation.confirmation import extract_booking_ids


def test_extracts_ids_from_inline_labels():
    html = """
        <div class="booking-confirmation">
            <span>Transaction ID: 0095562596</span>
            <span>PNR No: 6422380568</span>
        </div>
    """
    ids = extract_booking_ids(html)

    assert ids.transaction_id == "0095562596"
    assert ids.reservation_id == "6422380568"
    assert ids.complete


def test_extracts_ids_from_table_cells():
    html = """
        <table>
            <tr><th>Transaction Id</th><td><strong>100004512345</strong></td></tr>
            <tr><th>PNR Number</th><td>2751234567</td></tr>
        </table>
    """
    ids = extract_booking_ids(html)

    assert ids.transaction_id == "100004512345"
    assert ids.reservation_id == "2751234567"


def test_missing_ids_are_reported_as_incomplete():
    ids = extract_booking_ids("<html><body><h1>Payment pending</h1></body></html>")

    assert ids.transaction_id is None
    assert ids.reservation_id is None
    assert not ids.complete


def test_empty_page():
    assert not extract_booking_ids("").complete


def test_extracts_ids_from_indented_nested_cells():
    html = """
    <table class="booking-details">
        <tr>
            <td>
                <span class="label">Transaction ID</span>
            </td>
            <td>
                <span class="value">100004512345</span>
            </td>
        </tr>
        <tr>
            <td>
                <span class="label">PNR No</span>
            </td>
            <td>
                <span class="value">2751234567</span>
            </td>
        </tr>
    </table>
    """
    ids = extract_booking_ids(html)

    assert ids.transaction_id == "100004512345"
    assert ids.reservation_id == "2751234567"
