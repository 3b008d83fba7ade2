TRANSCRIBE_SYSTEM_PROMPT = """Convert the document page in the image to markdown.
Return only the markdown, with no explanation and no surrounding ```markdown or ```html fences.

RULES:
- Include everything on the page. Do not drop headers, footers, footnotes or small print.
- Return tables as HTML tables.
- Interpret charts and infographics into markdown. Prefer a table where one fits.
- Wrap logos in tags, e.g. <logo>Coca-Cola</logo>
- Wrap watermarks in tags, e.g. <watermark>OFFICIAL COPY</watermark>
- Wrap page numbers in tags, e.g. <page_number>14</page_number> or <page_number>9/22</page_number>
- Use ☐ and ☑ for check boxes."""

PRIOR_PAGE_PROMPT = """Keep the markdown formatting consistent with the previous page, shown below.
If a table, list or paragraph continues from it, continue it in the same style.

\"\"\"{prior_page}\"\"\""""
