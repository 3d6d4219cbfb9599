"""CSV export helper."""
import io
from typing import Dict, List, Sequence

import pandas as pd

def csv_response(rows: List[Dict], columns: Sequence[str], filename: str):
    """Render rows as a CSV attachment; headers are written even with no rows."""
    df = pd.DataFrame(rows, columns=list(columns))

    output = io.StringIO()
    df.to_csv(output, index=False, encoding='utf-8-sig')
    output.seek(0)

    return output.getvalue(), 200, {
        'Content-Type': 'text/csv; charset=utf-8',
        'Content-Disposition': f'attachment; filename={filename}'
    }
