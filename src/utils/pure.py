from typing import List, Literal, Optional

from db.models import Product, Transaction
from pos.pricing import format_money


def _cell(value) -> str:
    # a bare pipe in a product name would split the column
    return str(value).replace("|", "\\|").replace("\n", " ")


def generate_markdown_table(
    headers: Optional[List[str]],
    rows: List[List[str]],
    aligns: Optional[List[Literal["l", "c", "r"]]] = None,
) -> str:
    """
    Generate a Markdown table. Pipes and newlines in cells are escaped so
    each value stays in its column.

    Args:
        headers: List of column headers, or None to use first row as headers.
        rows: List of rows, each a list of strings.
        aligns: List of alignments ('l', 'c', 'r') for each column.
                Defaults to all center ('c').

    Returns:
        str: Markdown formatted table.
    """
    if not rows:
        return ""

    if not headers:
        headers, rows = rows[0], rows[1:]

    headers = [_cell(h) for h in headers]
    rows = [[_cell(c) for c in row] for row in rows]

    num_cols = len(headers)
    if aligns is None:
        aligns = ["c"] * num_cols
    elif len(aligns) != num_cols:
        raise ValueError("Length of aligns must match number of headers.")

    align_map = {
        "l": ":---",
        "c": ":---:",
        "r": "---:",
    }

    header_line = "| " + " | ".join(headers) + " |"
    align_line = "| " + " | ".join(align_map[a] for a in aligns) + " |"
    row_lines = ["| " + " | ".join(row) + " |" for row in rows]

    return "\n".join([header_line, align_line, *row_lines])


def transaction_markdown(tx: Transaction) -> str:
    """Receipt-style markdown for one transaction."""
    header = (
        f"### Transaction {tx.id[:8]}\n\n"
        f"Date: {tx.timestamp.astimezone():%Y-%m-%d %H:%M}  \n"
        f"Payment: {tx.payment_method.capitalize()}\n\n"
    )
    rows = [
        [
            line.product.name,
            line.product.sku,
            line.quantity,
            format_money(line.product.price),
            format_money(line.line_total),
        ]
        for line in tx.items
    ]
    table = generate_markdown_table(
        ["Product", "SKU", "Qty", "Unit Price", "Line Total"],
        rows,
        ["l", "l", "r", "r", "r"],
    )
    footer = (
        f"\n\n**Subtotal:** {format_money(tx.subtotal)}  \n"
        f"**Tax (8%):** {format_money(tx.tax)}  \n"
        f"**Total:** {format_money(tx.total)}"
    )
    return header + table + footer


def product_markdown(p: Product) -> str:
    rows = [
        ["ID", p.id],
        ["SKU", p.sku],
        ["Name", p.name],
        ["Category", p.category],
        ["Price", format_money(p.price)],
        ["Stock", p.stock],
        ["Expiry", p.expiry_date.isoformat() if p.expiry_date else "-"],
    ]
    return f"### {p.name}\n\n" + generate_markdown_table(
        ["Attribute", "Value"], rows, ["l", "l"]
    )
