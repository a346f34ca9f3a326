"""
Report Formatter

Turns aggregation results into chat replies. Pure rendering: no business
logic and no dependency on the host locale, so the same inputs always give
the same text. Amounts use Indonesian grouping ("Rp 1.500.000,5").
"""

from decimal import Decimal
from typing import Sequence

from dompetbot.errors import InsufficientFundsError
from dompetbot.models.transaction import (
    PeriodSummary,
    PocketSummary,
    QueryIntent,
    Transaction,
    TransactionType,
)


TOP_EXPENSE_CATEGORIES = 5


# =============================================================================
# FIXED REPLIES
# =============================================================================

ENTRY_FORMAT_HINT = """Format tidak valid. Gunakan:
📥 /pemasukan [jumlah] [deskripsi] ke pocket [nama_pocket]
📤 /pengeluaran [jumlah] [deskripsi] dari pocket [nama_pocket]

Contoh:
• /pemasukan 500rb gaji bulanan ke pocket utama
• /pengeluaran 25rb makan siang dari pocket harian"""

AMOUNT_FORMAT_HINT = "Format jumlah tidak valid. Contoh: 10rb, 100k, 50000"

TRANSFER_FORMAT_HINT = """Format transfer tidak valid. Gunakan:
"Transfer [jumlah] dari pocket [asal] ke pocket [tujuan]"

Contoh:
• Transfer 100rb dari pocket utama ke pocket harian
• Transfer 50k dari pocket bulanan ke pocket darurat"""

QUERY_USAGE_HINT = """Maaf, saya tidak mengerti permintaan Anda.

🔍 Perintah yang tersedia:
• "Berapa pengeluaran minggu ini?"
• "Saldo pocket utama"
• "List pocket"
• "Transfer 100rb dari pocket utama ke pocket harian"

Ketik /help untuk melihat semua perintah."""

ENTRY_FAILED = "Terjadi kesalahan saat memproses transaksi. Silakan coba lagi."
QUERY_FAILED = "Terjadi kesalahan saat mengambil data. Silakan coba lagi."
POCKET_BALANCE_FAILED = "Terjadi kesalahan saat mengambil saldo pocket."
POCKET_LIST_FAILED = "Terjadi kesalahan saat mengambil daftar pocket."
TRANSFER_FAILED = "Terjadi kesalahan saat transfer antar pocket."

HELP_TEXT = """🤖 Dompet Bot - Bantuan

📝 MENCATAT TRANSAKSI:
• /pemasukan [jumlah] [deskripsi] ke pocket [nama]
  Contoh: /pemasukan 500rb gaji bulanan ke pocket utama

• /pengeluaran [jumlah] [deskripsi] dari pocket [nama]
  Contoh: /pengeluaran 25rb makan siang dari pocket harian

💰 FORMAT JUMLAH:
• 10rb = 10.000 • 100k = 100.000 • 1jt = 1.000.000

👝 POCKET MANAGEMENT:
• "Saldo pocket [nama]" - Lihat saldo pocket tertentu
• "Saldo pocket" - Lihat semua pocket
• "List pocket" - Daftar semua pocket
• "Transfer 100rb dari pocket utama ke pocket harian"

📊 MELIHAT LAPORAN:
• "Berapa pengeluaran minggu ini?"
• "Total pemasukan bulan ini"
• "Laporan keuangan tahun ini"
• "Pengeluaran hari ini"

💡 TIPS POCKET:
• Pocket otomatis dibuat saat transaksi pertama
• Contoh nama pocket: utama, harian, bulanan, darurat
• Bot akan cek saldo pocket sebelum pengeluaran
• Transfer antar pocket untuk mengatur uang

Ketik /help untuk melihat pesan ini lagi."""


# =============================================================================
# NUMBERS
# =============================================================================

def format_number(value: Decimal) -> str:
    """1500000.5 -> '1.500.000,5'. At most two decimals, no trailing zeros."""
    value = Decimal(value)
    sign = "-" if value < 0 else ""
    whole, _, fraction = f"{abs(value).quantize(Decimal('0.01')):.2f}".partition(".")
    grouped = f"{int(whole):,}".replace(",", ".")
    fraction = fraction.rstrip("0")
    return f"{sign}{grouped},{fraction}" if fraction else f"{sign}{grouped}"


def format_money(value: Decimal) -> str:
    return f"Rp {format_number(value)}"


def _sign_marker(value: Decimal) -> str:
    return "✅" if value >= 0 else "❌"


def _status_marker(value: Decimal) -> str:
    if value > 0:
        return "✅"
    if value == 0:
        return "⚪"
    return "❌"


# =============================================================================
# REPORTS
# =============================================================================

def format_period_report(summary: PeriodSummary, intent: QueryIntent) -> str:
    """Income/expense summary for one query window."""
    header = f"📊 Laporan {intent.period}".rstrip()

    if summary.transaction_count == 0:
        return f"{header}\n\nTidak ada transaksi ditemukan untuk periode ini."

    lines = [
        header,
        f"📅 Periode: {intent.start_text} - {intent.end_text}",
    ]
    if intent.pocket:
        lines.append(f"👝 Pocket: {intent.pocket}")
    if intent.category:
        lines.append(f"🏷️ Kategori: {intent.category}")

    lines += [
        "",
        "💰 RINGKASAN:",
        f"📈 Total Pemasukan: {format_money(summary.income_total)}",
        f"📉 Total Pengeluaran: {format_money(summary.expense_total)}",
        f"💳 Saldo: {format_money(summary.net)} {_sign_marker(summary.net)}",
    ]

    if summary.expense_by_category:
        top = sorted(
            summary.expense_by_category.items(),
            key=lambda item: item[1],
            reverse=True,
        )[:TOP_EXPENSE_CATEGORIES]
        lines += ["", "📉 TOP PENGELUARAN:"]
        lines += [f"• {category}: {format_money(amount)}" for category, amount in top]

    if summary.income_by_category:
        lines += ["", "📈 PEMASUKAN:"]
        lines += [
            f"• {category}: {format_money(amount)}"
            for category, amount in summary.income_by_category.items()
        ]

    lines += ["", f"📊 Total Transaksi: {summary.transaction_count}"]
    return "\n".join(lines)


def format_pocket_detail(
    name: str,
    balance: Decimal,
    recent: Sequence[Transaction],
) -> str:
    lines = [
        f"👝 POCKET: {name.upper()}",
        f"💰 Saldo: {format_money(balance)}",
    ]
    if recent:
        lines += ["", "📋 TRANSAKSI TERAKHIR:"]
        for t in recent:
            icon = "📈" if t.type == TransactionType.INCOME else "📉"
            when = t.date_text or "-"
            lines.append(f"{icon} {when} - {format_money(t.amount)} ({t.description})")
    return "\n".join(lines)


def format_all_pocket_balances(summaries: Sequence[PocketSummary]) -> str:
    lines = ["👝 SALDO SEMUA POCKET:", ""]
    if not summaries:
        lines.append("Belum ada pocket.")
    lines += [f"💰 {s.name}: {format_money(s.balance)}" for s in summaries]

    total = sum((s.balance for s in summaries), Decimal(0))
    lines += [
        "",
        f"💎 Total Keseluruhan: {format_money(total)}",
        "",
        '💡 Tip: Ketik "saldo pocket [nama]" untuk detail pocket tertentu',
    ]
    return "\n".join(lines)


def format_pocket_list(summaries: Sequence[PocketSummary]) -> str:
    lines = ["📝 DAFTAR POCKET:", ""]
    if not summaries:
        lines.append("Belum ada pocket.")
    lines += [
        f"{_status_marker(s.balance)} {s.name}: {format_money(s.balance)}"
        for s in summaries
    ]
    lines += [
        "",
        "💡 Tips:",
        '• Ketik "saldo pocket [nama]" untuk detail',
        "• Pocket otomatis dibuat saat transaksi pertama",
        "• Gunakan nama pocket yang mudah diingat",
    ]
    return "\n".join(lines)


# =============================================================================
# CONFIRMATIONS AND REJECTIONS
# =============================================================================

def format_entry_confirmation(transaction: Transaction, balance: Decimal) -> str:
    return "\n".join([
        "✅ Transaksi berhasil dicatat!",
        f"📅 Tanggal: {transaction.date_text} {transaction.tx_time}",
        f"💰 Jenis: {transaction.type.value}",
        f"💵 Jumlah: {format_money(transaction.amount)}",
        f"📝 Deskripsi: {transaction.description}",
        f"🏷️ Kategori: {transaction.category}",
        f"👝 Pocket: {transaction.pocket}",
        f'💳 Saldo pocket "{transaction.pocket}": {format_money(balance)}',
    ])


def format_transfer_confirmation(
    debit: Transaction,
    credit: Transaction,
    from_balance: Decimal,
    to_balance: Decimal,
) -> str:
    return "\n".join([
        "✅ Transfer berhasil!",
        f"💸 Dari: {debit.pocket} → {format_money(from_balance)}",
        f"💰 Ke: {credit.pocket} → {format_money(to_balance)}",
        f"💵 Jumlah: {format_money(debit.amount)}",
        f"📅 Waktu: {debit.date_text} {debit.tx_time}",
    ])


def format_insufficient_funds(error: InsufficientFundsError) -> str:
    return "\n".join([
        f'❌ Saldo pocket "{error.pocket}" tidak mencukupi!',
        f"💰 Saldo saat ini: {format_money(error.balance)}",
        f"💸 Yang dibutuhkan: {format_money(error.required)}",
        f'📊 Ketik "saldo pocket {error.pocket}" untuk melihat detail',
    ])


def format_transfer_rejected(error: InsufficientFundsError) -> str:
    return "\n".join([
        "❌ Transfer gagal!",
        f'Saldo pocket "{error.pocket}" tidak mencukupi.',
        f"💰 Saldo: {format_money(error.balance)}",
        f"💸 Dibutuhkan: {format_money(error.required)}",
    ])
