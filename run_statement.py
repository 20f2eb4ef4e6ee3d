import argparse
from pathlib import Path

from str_invoicer.invoice import build_statement_table, compute_invoice_totals, expense_breakdown
from str_invoicer.loaders import load_classification_table, read_spreadsheet
from str_invoicer.mapping import infer_mapping_from_rows, missing_required_fields
from str_invoicer.models import ProcessingConfig
from str_invoicer.pipeline import process_data
from str_invoicer.session import SessionState, ProcessStep, session_filename, write_session


def parse_args():
    parser = argparse.ArgumentParser(description="Build owner statement figures from OTA and GL exports.")
    parser.add_argument("ota", type=Path, help="OTA bookings export (.csv/.xlsx)")
    parser.add_argument("gl", type=Path, help="General ledger export (.csv/.xlsx)")
    parser.add_argument("--start", required=True, help="Period start, YYYY-MM-DD")
    parser.add_argument("--end", required=True, help="Period end, YYYY-MM-DD")
    parser.add_argument("--classification", type=Path, help="Account → category sheet")
    parser.add_argument("--owner", default="")
    parser.add_argument("--fee-percent", type=float, default=20.0)
    parser.add_argument("--fee-base", choices=["gross_revenue", "net_payouts"], default="gross_revenue")
    parser.add_argument("--save-session", type=Path, help="Directory to write a session snapshot into")
    parser.add_argument("--debug", action="store_true")
    return parser.parse_args()


def main():
    args = parse_args()

    ota_rows = read_spreadsheet(args.ota)
    gl_rows = read_spreadsheet(args.gl)
    table, warnings = ({}, [])
    if args.classification:
        table, warnings = load_classification_table(args.classification)
    for w in warnings:
        print(f"WARNING: {w}")

    config = ProcessingConfig(
        period_start=args.start,
        period_end=args.end,
        owner_name=args.owner,
        mgmt_fee_percent=args.fee_percent,
        fee_base_mode=args.fee_base,
    )
    mapping = infer_mapping_from_rows(ota_rows, gl_rows)
    missing = missing_required_fields(mapping)
    if missing["ota"] or missing["gl"]:
        print(f"Could not map required columns: {missing}")
        return 1

    result = process_data(ota_rows, gl_rows, mapping, config, table, debug=args.debug)
    totals = compute_invoice_totals(result, config)

    print("=== STATS ===")
    for k, v in result.stats.model_dump().items():
        print(f"{k}: {v:,.2f}" if isinstance(v, float) else f"{k}: {v}")

    print("\n=== STATEMENT ===")
    print(build_statement_table(totals))

    print("\n=== EXPENSES BY CATEGORY ===")
    print(expense_breakdown(result))

    print(f"\n{len(result.review_rows)} expense rows need review.")

    if args.save_session:
        state = SessionState(
            current_step=ProcessStep.REVIEW,
            files={"ota_raw": ota_rows, "gl_raw": gl_rows, "classification_map": table},
            config=config,
            mappings=mapping,
            processed_data=result,
        )
        path = write_session(state, args.save_session / session_filename(config))
        print(f"Session saved to {path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
