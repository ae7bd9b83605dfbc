from flask import Flask, render_template, request, redirect, url_for, flash, abort, has_request_context
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from markupsafe import Markup, escape
from datetime import datetime, date
import os
import re
from dotenv import load_dotenv
from quick_forms import QUICK_FORMS

load_dotenv()

app = Flask(__name__)
basedir = os.path.abspath(os.path.dirname(__file__))
database_url = os.getenv('DATABASE_URL')
if database_url and database_url.startswith("postgres://"):
    database_url = database_url.replace("postgres://", "postgresql://", 1)

app.config['SQLALCHEMY_DATABASE_URI'] = database_url or 'sqlite:///' + os.path.join(basedir, 'instance', 'farm.db')
app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
app.config['SECRET_KEY'] = os.getenv('SECRET_KEY', 'dev_key')
os.makedirs(os.path.join(basedir, 'instance'), exist_ok=True)

app.logger.setLevel(os.getenv('LOG_LEVEL', 'INFO').upper())

@app.template_filter('date_fmt')
def date_fmt_filter(value):
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.strftime('%d-%b-%Y %H:%M')
    if isinstance(value, date):
        return value.strftime('%d-%b-%Y')
    return value

db = SQLAlchemy(app)
migrate = Migrate(app, db)

# --- Models ---

log_asset = db.Table(
    'log_asset',
    db.Column('log_id', db.Integer, db.ForeignKey('log.id'), primary_key=True),
    db.Column('asset_id', db.Integer, db.ForeignKey('asset.id'), primary_key=True),
)

class Asset(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    type = db.Column(db.String(50), default='animal', nullable=False) # 'animal', 'equipment', ...
    status = db.Column(db.String(20), default='active', nullable=False) # 'active' or 'archived'
    created = db.Column(db.DateTime, default=datetime.now)

    logs = db.relationship('Log', secondary=log_asset, back_populates='assets', lazy=True)

    __table_args__ = (db.Index('ix_asset_type_status', 'type', 'status'),)

    def to_link(self):
        return Markup('<a href="{}">{}</a>').format(url_for('asset_view', id=self.id), self.name)

class Log(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    type = db.Column(db.String(50), nullable=False) # 'observation', 'activity', ...
    timestamp = db.Column(db.DateTime, nullable=False, default=datetime.now)
    status = db.Column(db.String(20), default='done', nullable=False) # 'done' or 'pending'

    assets = db.relationship('Asset', secondary=log_asset, back_populates='logs', lazy=True)
    quantities = db.relationship('Quantity', backref='log', lazy=True, cascade="all, delete-orphan",
                                 order_by='Quantity.id')

    def to_link(self):
        if not self.assets:
            return escape(self.name)
        url = url_for('asset_view', id=self.assets[0].id, _anchor=f'log-{self.id}')
        return Markup('<a href="{}">{}</a>').format(url, self.name)

class Quantity(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    log_id = db.Column(db.Integer, db.ForeignKey('log.id'), nullable=False)
    value = db.Column(db.Float, nullable=False)
    measure = db.Column(db.String(50), nullable=True) # 'weight', 'length', 'count', ...
    units = db.Column(db.String(50), nullable=True) # 'lbs', 'kg', ...
    label = db.Column(db.String(100), nullable=True)

    def to_dict(self):
        data = {'value': self.value}
        for field in ('measure', 'units', 'label'):
            if getattr(self, field):
                data[field] = getattr(self, field)
        return data

# --- Quick Form Services ---

class AssetStorage:
    def load_by_properties(self, **properties):
        return Asset.query.filter_by(**properties).order_by(Asset.id).all()

    def load(self, asset_id):
        try:
            asset_id = int(asset_id)
        except (ValueError, TypeError):
            return None
        return db.session.get(Asset, asset_id)

class FlashMessenger:
    def add_warning(self, message):
        flash(message, 'warning')

    def add_error(self, message):
        flash(message, 'danger')

    def add_status(self, message):
        flash(message, 'success')

def create_log(fields, messenger=None):
    """
    Persist a log from a field bag: name, type, asset (one or a list),
    quantity (list of dicts), and optionally timestamp and status.
    Each call commits on its own. The "Log created" notice is only flashed
    inside a request, so scripts and CLI commands can call it too.
    """
    messenger = messenger or FlashMessenger()

    assets = fields.get('asset') or []
    if not isinstance(assets, (list, tuple)):
        assets = [assets]

    log = Log(
        name=fields['name'],
        type=fields['type'],
        timestamp=fields.get('timestamp') or datetime.now(),
        status=fields.get('status') or 'done',
    )
    log.assets = list(assets)
    for q in fields.get('quantity') or []:
        log.quantities.append(Quantity(
            value=q['value'],
            measure=q.get('measure'),
            units=q.get('units'),
            label=q.get('label'),
        ))

    db.session.add(log)
    db.session.commit()

    app.logger.info("Created %s log %s '%s' with %d quantities", log.type, log.id, log.name, len(log.quantities))
    if has_request_context():
        messenger.add_status(Markup('Log created: {}').format(log.to_link()))
    return log

def get_quick_form(form_id):
    form_class = QUICK_FORMS.get(form_id)
    if form_class is None:
        return None
    return form_class(asset_storage=AssetStorage(), messenger=FlashMessenger(), log_creator=create_log)

_row_field_re = re.compile(r'^animals\[([^\]]+)\]\[([^\]]+)\]$')

def collect_rows(form):
    """
    Group 'animals[<id>][<key>]' fields into {id: {key: value}},
    keeping the order in which rows were submitted.
    """
    rows = {}
    for name, value in form.items(multi=False):
        m = _row_field_re.match(name)
        if not m:
            continue
        animal_id, key = m.groups()
        rows.setdefault(animal_id, {})
        if key != 'asset':
            rows[animal_id][key] = value
    return rows

# --- Routes ---

@app.route('/')
def index():
    return render_template('index.html', quick_forms=QUICK_FORMS.values())

@app.route('/quick/<form_id>', methods=['GET', 'POST'])
def quick_form(form_id):
    quick = get_quick_form(form_id)
    if quick is None:
        abort(404)

    if request.method == 'POST':
        rows = collect_rows(request.form)
        logs = quick.submit_form(rows)
        app.logger.info("Quick form %s submitted: %d rows, %d logs created", form_id, len(rows), len(logs))
        return redirect(url_for('quick_form', form_id=form_id))

    form = quick.build_form()
    return render_template('quick_form.html', quick=quick, form=form)

@app.route('/asset/<int:id>')
def asset_view(id):
    asset = Asset.query.get_or_404(id)
    logs = sorted(asset.logs, key=lambda l: l.timestamp, reverse=True)
    return render_template('asset.html', asset=asset, logs=logs)

if __name__ == '__main__':
    app.run(debug=True)
