from .excel import cell_to_text, read_excel, read_raw_products
