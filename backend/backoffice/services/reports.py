from __future__ import annotations

from datetime import datetime, time

import xlsxwriter

from backoffice.services.commission import CommissionResult
from backoffice.services.money import money_out
from backoffice.services.periods import competence_month, parse_date
from backoffice.services.reconciliation import CaptationSummary, MonthlyRealized, compare_with_goals


def build_monthly_report(
    realized: MonthlyRealized,
    summary: CaptationSummary,
    commission: CommissionResult,
    month: int,
    year: int,
    out_file,
    goals: dict | None = None,
):
    competence = competence_month(month, year)
    wb = xlsxwriter.Workbook(out_file, {"in_memory": True})
    base_font = "Calibri"

    # ----------------------------
    # Formats
    # ----------------------------
    title = wb.add_format({"bold": True, "font_name": base_font, "font_size": 14, "font_color": "#0f172a"})
    meta_label = wb.add_format({"bold": True, "font_name": base_font, "font_size": 11, "font_color": "#334155"})
    subtle = wb.add_format({"font_name": base_font, "font_size": 10, "font_color": "#64748b"})

    header = wb.add_format(
        {
            "bold": True,
            "font_name": base_font,
            "font_size": 11,
            "bg_color": "#F1F5F9",
            "border": 1,
            "align": "center",
            "valign": "vcenter",
        }
    )

    date_fmt = wb.add_format({"font_name": base_font, "font_size": 11, "num_format": "yyyy-mm-dd", "border": 1})
    money2 = wb.add_format(
        {"font_name": base_font, "font_size": 11, "num_format": "#,##0.00", "border": 1, "align": "right"}
    )
    pct2 = wb.add_format(
        {"font_name": base_font, "font_size": 11, "num_format": "0.00%", "border": 1, "align": "right"}
    )
    text_cell = wb.add_format({"font_name": base_font, "font_size": 11, "border": 1, "align": "left"})

    total_label = wb.add_format(
        {"bold": True, "font_name": base_font, "font_size": 11, "bg_color": "#F8FAFC", "border": 1, "align": "left"}
    )
    total_money2 = wb.add_format(
        {
            "bold": True,
            "font_name": base_font,
            "font_size": 11,
            "bg_color": "#F8FAFC",
            "border": 1,
            "num_format": "#,##0.00",
            "align": "right",
        }
    )

    # ----------------------------
    # Sheet 1: KPIs
    # ----------------------------
    ws = wb.add_worksheet("KPIs")
    ws.set_column(0, 0, 28)
    ws.set_column(1, 4, 18)

    ws.write(0, 0, f"Monthly Reconciliation {competence}", title)
    ws.write(1, 0, "Generated", meta_label)
    ws.write(1, 1, datetime.now().strftime("%Y-%m-%d %H:%M"), subtle)

    goals = goals or compare_with_goals(realized)
    labels = {
        "realized_revenue": "Realized Revenue",
        "net_new_money": "Net New Money",
        "internal_transfer_volume": "Internal Transfers",
    }
    for c, h in enumerate(["KPI", "Realized", "Goal", "Gap", "Attainment"]):
        ws.write(3, c, h, header)
    r = 4
    for key, label in labels.items():
        g = goals[key]
        ws.write(r, 0, label, text_cell)
        ws.write_number(r, 1, money_out(g.realized), money2)
        ws.write_number(r, 2, money_out(g.goal), money2)
        ws.write_number(r, 3, money_out(g.gap), money2)
        if g.attainment_percent is None:
            ws.write_blank(r, 4, None, pct2)
        else:
            ws.write_number(r, 4, float(g.attainment_percent) / 100, pct2)
        r += 1

    r += 1
    for label, value in (
        ("Offers Revenue", realized.offers_revenue),
        ("Cross-sell Revenue", realized.cross_revenue),
        ("Ledger Revenue", realized.ledger_revenue),
        ("Inflows", summary.inflows),
        ("Outflows", summary.outflows),
        ("Balance", summary.balance),
    ):
        ws.write(r, 0, label, meta_label)
        ws.write_number(r, 1, money_out(value), money2)
        r += 1

    # ----------------------------
    # Sheet 2: Events
    # ----------------------------
    ev = wb.add_worksheet("Events")
    ev.set_column(0, 0, 12)  # Date
    ev.set_column(1, 2, 18)  # Direction / Category
    ev.set_column(3, 3, 22)  # Source
    ev.set_column(4, 4, 18)  # Amount
    ev.set_column(5, 5, 36)  # Notes

    ev_headers = ["Date", "Direction", "Category", "Source", "Amount", "Notes"]
    ev.set_row(0, 18)
    for c, h in enumerate(ev_headers):
        ev.write(0, c, h, header)
    ev.freeze_panes(1, 1)

    er = 1
    for e in realized.events:
        d = parse_date(e.date)
        if d is not None:
            ev.write_datetime(er, 0, datetime.combine(d, time.min), date_fmt)
        else:
            ev.write_blank(er, 0, None, date_fmt)
        ev.write(er, 1, e.direction or "", text_cell)
        ev.write(er, 2, e.category or "", text_cell)
        ev.write(er, 3, e.source_ref or e.source_kind or "", text_cell)
        ev.write_number(er, 4, money_out(e.amount), money2)
        ev.write(er, 5, e.notes or "", text_cell)
        er += 1

    if er > 1:
        ev.autofilter(0, 0, er - 1, 5)

    # ----------------------------
    # Sheet 3: Daily Captation
    # ----------------------------
    dy = wb.add_worksheet("Daily Captation")
    dy.set_column(0, 0, 8)
    dy.set_column(1, 4, 20)
    for c, h in enumerate(["Day", "Net New Money", "Internal Transfers", "NNM (cumulative)", "Transfers (cumulative)"]):
        dy.write(0, c, h, header)
    dy.freeze_panes(1, 1)
    for i, p in enumerate(summary.daily, start=1):
        dy.write_number(i, 0, p.day, text_cell)
        dy.write_number(i, 1, money_out(p.net_new_money), money2)
        dy.write_number(i, 2, money_out(p.internal_transfer), money2)
        dy.write_number(i, 3, money_out(p.net_new_money_cumulative), money2)
        dy.write_number(i, 4, money_out(p.internal_transfer_cumulative), money2)

    # ----------------------------
    # Sheet 4: Commission
    # ----------------------------
    cm = wb.add_worksheet("Commission")
    cm.set_column(0, 0, 20)
    cm.set_column(1, 6, 18)
    cm_headers = ["Class", "Revenue", "Pass-through %", "Markup %", "Pass-through", "Markup", "Class Gross"]
    for c, h in enumerate(cm_headers):
        cm.write(0, c, h, header)

    cr = 1
    for b in commission.per_class_breakdown:
        cm.write(cr, 0, b.asset_class, text_cell)
        cm.write_number(cr, 1, money_out(b.revenue_amount), money2)
        cm.write_number(cr, 2, float(b.pass_through_fraction), pct2)
        cm.write_number(cr, 3, float(b.markup_fraction), pct2)
        cm.write_number(cr, 4, money_out(b.pass_through_value), money2)
        cm.write_number(cr, 5, money_out(b.markup_value), money2)
        cm.write_number(cr, 6, money_out(b.class_gross), money2)
        cr += 1

    if cr > 1:
        cm.write(cr, 0, "Totals", total_label)
        cm.write_formula(cr, 1, f"=SUM(B2:B{cr})", total_money2)
        cm.write_blank(cr, 2, None, total_label)
        cm.write_blank(cr, 3, None, total_label)
        cm.write_formula(cr, 4, f"=SUM(E2:E{cr})", total_money2)
        cm.write_formula(cr, 5, f"=SUM(F2:F{cr})", total_money2)
        cm.write_formula(cr, 6, f"=SUM(G2:G{cr})", total_money2)
        cr += 1

    cr += 1
    for label, value in (
        ("Cross-sell Commission", commission.cross_commission),
        ("Fixed Bonus", commission.bonus_fixed),
        ("Adjustment", commission.adjustment),
        ("Gross Salary", commission.gross_salary),
        ("Income Tax", commission.tax_withheld),
        ("Net Salary", commission.net_salary),
    ):
        cm.write(cr, 0, label, meta_label)
        cm.write_number(cr, 1, money_out(value), money2)
        cr += 1

    wb.close()
