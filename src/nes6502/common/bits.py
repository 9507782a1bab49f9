# src/nes6502/common/bits.py
"""
8bit値の単一ビット操作ユーティリティ。

ステータスレジスタ(P)のフラグ操作など、プロジェクト全体で共有される
副作用のない純粋関数を提供します。posは0〜7の範囲で全域的に定義されます。
"""


# @intent:responsibility 指定ビットが1かどうかを返す。
def get_bit(value: int, pos: int) -> bool:
    return (value & (1 << pos)) != 0


# @intent:responsibility 指定ビットを1にした値を返す。
def set_bit(value: int, pos: int) -> int:
    return (value | (1 << pos)) & 0xFF


# @intent:responsibility 指定ビットを0にした値を返す。
def clear_bit(value: int, pos: int) -> int:
    return value & ~(1 << pos) & 0xFF


# @intent:responsibility 条件に応じてset_bit/clear_bitを切り替える。
def assign_bit(value: int, pos: int, flag: bool) -> int:
    return set_bit(value, pos) if flag else clear_bit(value, pos)
