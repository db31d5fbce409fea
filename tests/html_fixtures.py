from hzpp.schemas.JourneySchemas import Station

STATIONS = [
    Station(id='72460', name='Zagreb Glavni kolodvor'),
    Station(id='72480', name='Zagreb Zapadni kolodvor'),
    Station(id='72800', name='Karlovac'),
    Station(id='73000', name='Ogulin'),
    Station(id='71000', name='Rijeka'),
    Station(id='75000', name='Split'),
]

TOKENS = '''
<form>
  <input name="__RequestVerificationToken" type="hidden" value="csrf-123">
  <input name="StateForClient" type="hidden" value="state-abc">
</form>
'''


def journey_row(departure, number, arrival, duration, transfers, price, warning=False):
    icon = '<span class="warningIcon"></span>' if warning else ''
    return (f'<div class="item row">'
            f'<div class="cell">{departure}</div>'
            f'<div class="cell"><a href="#">{number}</a></div>'
            f'<div class="cell">{arrival}</div>'
            f'<div class="cell">{duration}</div>'
            f'<div class="cell">{transfers}</div>'
            f'<div class="cell">{price}{icon}</div>'
            f'</div>')


def journey_page(outward_rows, return_rows=None, tokens=TOKENS):
    header = '<div class="header row"><div class="cell">Polazak</div></div>'
    page = f'<html><body>{tokens}<div id="outwardJourneyTableContainer">{header}{"".join(outward_rows)}</div>'
    if return_rows is not None:
        page += f'<div id="returnJourneyTableContainer">{header}{"".join(return_rows)}</div>'
    return page + '</body></html>'


def composition_row(name, arr='', dep='', late='', wait='', train='', css='', features=()):
    images = ''.join(f'<img src="/img/f.png" title="{x} - opis">' for x in features)
    return (f'<tr class="{css}"><td>{name}</td><td>{arr}</td><td>{dep}</td><td>{late}</td>'
            f'<td>{wait}</td><td>{train}</td><td>{images}</td></tr>')


def composition_page(rows, total_duration='02:30'):
    return ('<html><body><table id="trainDetailTable">'
            '<thead><tr><th>Kolodvor</th><th>Dolazak</th><th>Odlazak</th><th>Kasni</th><th>Čeka</th>'
            '<th>Vlak</th><th></th></tr></thead>'
            f'<tbody>{"".join(rows)}</tbody></table>'
            f'<div class="disclaimer-content col-1-2">Ukupno trajanje: <span>{total_duration}</span></div>'
            '</body></html>')


SINGLE_TRAIN_ROWS = [
    composition_row('Zagreb Gl. kol.', dep='10:00', train='2201', css='transfer-point',
                    features=['Vagoni drugog razreda', 'Nepoznato']),
    composition_row('Karlovac', arr='10:40', dep='10:42', train='2201'),
    composition_row('Rijeka', arr='12:30', train='2201', css='end-point'),
]

TRANSFER_ROWS = [
    composition_row('Zagreb Gl. kol.', dep='22:00', train='100', css='transfer-point'),
    composition_row('Karlovac', arr='22:40', dep='22:42', train='100'),
    composition_row('Ogulin', arr='23:40', dep='00:10', wait='00:30', train='200', css='transfer-point'),
    composition_row('Rijeka', arr='01:30', train='200', css='end-point'),
]


def live_page(station='ZAGREB GL. KOL.', status='Kasni 12 min.', state='Odlazak 18.10.26 10:12', bus=False):
    return ('<html><body>'
            f'<p><i>Kolodvor:</i> <strong>{station}</strong></p>'
            + ('<p><i>Prijevoz autobusom, zamjenski autobus</i></p>' if bus else '')
            + f'<font color="red">{status}</font>'
            f'<font>{state}</font>'
            '</body></html>')
