"""Report builder — text and JSON output for jop-mixer results."""

import json
from typing import Any

from jop_mixer.core.colour import rgb_to_hex
from jop_mixer.core.dyes import DyeTable
from jop_mixer.core.types import MixResult, Report


def format_result_text(result: MixResult) -> str:
    """Format a search result as human-readable text."""
    lines = [f'target {rgb_to_hex(result.target)}  ->  {result.hex}  ΔE={result.delta_e:.2f}']
    if result.snapped:
        (name,) = result.counts
        lines.append(f'  snapped to {name} (no mixing)')
    elif result.counts:
        parts = [f'{name}×{count}' for name, count in sorted(result.counts.items(), key=lambda kv: (-kv[1], kv[0]))]
        lines.append(f'  dyes: {", ".join(parts)}  ({result.steps} total)')
    else:
        lines.append('  dyes: none (blank canvas)')

    for i, swatch in enumerate(result.swatches, start=1):
        lines.append(f'  {i:>2}. +{swatch.name:<11} {swatch.hex}  ΔE={swatch.delta_e:.2f}')

    if result.irl is not None:
        lines.append(f'  irl preview: {rgb_to_hex(result.irl)}')
    return '\n'.join(lines)


def format_result_json(result: MixResult) -> str:
    return json.dumps(result.to_dict(), indent=2)


def format_dyes_text(dyes: DyeTable) -> str:
    lines = []
    for dye in dyes:
        L, a, b = dye.lab
        lines.append(f'{dye.index:>2}  {dye.name:<11} {dye.hex}  max={dye.max:<3}  Lab=({L:.2f}, {a:.2f}, {b:.2f})')
    return '\n'.join(lines)


def format_dyes_json(dyes: DyeTable) -> str:
    obj = [
        {'index': d.index, 'name': d.name, 'hex': d.hex, 'rgb': list(d.rgb), 'max': d.max, 'lab': list(d.lab)}
        for d in dyes
    ]
    return json.dumps(obj, indent=2)


def format_report_text(report: Report) -> str:
    """Format a panel report as human-readable text."""
    lines = []
    if report.title:
        lines.append(report.title)
        lines.append('')
    for name, data in report.checks.items():
        mark = '✓' if data.get('pass') else '✗'
        detail = '  '.join(f'{k}={v}' for k, v in data.items() if k != 'pass')
        lines.append(f'  {mark} {name:<20} {detail}')
    total = report.pass_count + report.fail_count
    if total > 0:
        lines.append('')
        lines.append(f'PASS {report.pass_count}/{total}  FAIL {report.fail_count}/{total}')
    return '\n'.join(lines)


def format_report_json(report: Report) -> str:
    obj: dict[str, Any] = {
        'title': report.title,
        'checks': [{'name': name, **data} for name, data in report.checks.items()],
        'summary': {
            'total': report.pass_count + report.fail_count,
            'pass': report.pass_count,
            'fail': report.fail_count,
        },
    }
    return json.dumps(obj, indent=2)
