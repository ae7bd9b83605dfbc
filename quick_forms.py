import logging
import math
from collections import namedtuple

logger = logging.getLogger(__name__)

# Quantity measurements captured by the animal observation form.
# Keys must be unique. 'measure' is the semantic quantity kind (weight, length,
# volume, ...). 'units' and 'label' are optional and left off the quantity when blank.
MEASUREMENTS_REGISTRY = {
    'weight': {'heading': 'Weight', 'measure': 'weight', 'units': 'lbs', 'label': 'Current weight'},
}

MeasurementDefinition = namedtuple('MeasurementDefinition', ['key', 'heading', 'measure', 'units', 'label'],
                                   defaults=('', '', None, None))


def load_measurements(registry=None):
    registry = MEASUREMENTS_REGISTRY if registry is None else registry
    return tuple(MeasurementDefinition(key=key, **conf) for key, conf in registry.items())


MEASUREMENTS = load_measurements()


class InvalidMeasurementValue(ValueError):
    pass


def parse_measurement_value(raw):
    """
    Returns None for an empty submission (missing, blank or zero),
    otherwise the number (int when integral).
    Any zero counts as empty, so '0.0', '00' and '-0' are dropped like '0'.
    Raises InvalidMeasurementValue for anything that is not a finite number.
    """
    if raw is None or raw is False:
        return None
    if isinstance(raw, str):
        raw = raw.strip()
        if not raw:
            return None
    try:
        value = float(raw)
    except (ValueError, TypeError):
        raise InvalidMeasurementValue(f"'{raw}' is not a number.")
    if not math.isfinite(value):
        raise InvalidMeasurementValue(f"'{raw}' is not a number.")
    if value == 0:
        return None
    if value.is_integer():
        return int(value)
    return value


def build_quantity(measurement, value):
    quantity = {'value': value}
    if measurement.measure:
        quantity['measure'] = measurement.measure
    if measurement.units:
        quantity['units'] = measurement.units
    if measurement.label:
        quantity['label'] = measurement.label
    return quantity


def build_quantities(measurements, values):
    quantities = []
    for measurement in measurements:
        value = parse_measurement_value(values.get(measurement.key))
        if value is None:
            continue
        quantities.append(build_quantity(measurement, value))
    return quantities


class QuickForm:
    id = None
    label = ''
    description = ''
    help_text = ''
    permissions = ()

    def __init__(self, messenger):
        self.messenger = messenger

    def build_form(self):
        raise NotImplementedError

    def submit_form(self, rows):
        raise NotImplementedError


class AnimalObservation(QuickForm):
    id = 'animal_observation'
    label = 'Animal observations'
    description = 'Record standard animal observations.'
    help_text = 'Use this form to record standard animal observations.'
    permissions = ('create observation log',)

    def __init__(self, asset_storage, messenger, log_creator, measurements=MEASUREMENTS):
        super().__init__(messenger)
        self.asset_storage = asset_storage
        self.log_creator = log_creator
        self.measurements = tuple(measurements)

    def build_form(self):
        """
        Table of active animals with one number field per measurement.
        Returns an empty dict (and warns) when there are no active animals.
        """
        animals = self.asset_storage.load_by_properties(type='animal', status='active')

        if not animals:
            self.messenger.add_warning('No animals found.')
            return {}

        headers = ['Animal']
        for measurement in self.measurements:
            if measurement.heading:
                headers.append(measurement.heading)

        rows = {}
        for animal in animals:
            row = {'asset': {'type': 'markup', 'markup': animal.to_link()}}
            for measurement in self.measurements:
                row[measurement.key] = {
                    'type': 'number',
                    'title': measurement.heading,
                    'title_display': 'invisible',
                    'required': False,
                }
            rows[animal.id] = row

        return {'animals': {'type': 'table', 'header': headers, 'rows': rows}}

    def submit_form(self, rows):
        """
        Creates one observation log per submitted row.

        Rows whose animal cannot be loaded (missing, or an asset that is not
        an animal), or that carry a value that is not a number, are skipped
        with an error notice. Every other row gets a log, even when all of its
        measurements were left blank.
        """
        logs = []
        for animal_id, values in rows.items():
            animal = self.asset_storage.load(animal_id)
            if animal is None or animal.type != 'animal':
                logger.warning("Skipping observation row: animal %s not found", animal_id)
                self.messenger.add_error(f'Animal {animal_id} could not be found. No observation was recorded for it.')
                continue

            try:
                quantities = build_quantities(self.measurements, values)
            except InvalidMeasurementValue as e:
                logger.warning("Skipping observation row for animal %s: %s", animal_id, e)
                self.messenger.add_error(f'Invalid measurement for {animal.name}: {e} No observation was recorded for it.')
                continue

            logs.append(self.log_creator({
                'name': f'Animal observation: {animal.name}',
                'type': 'observation',
                'asset': animal,
                'quantity': quantities,
            }))
        return logs


QUICK_FORMS = {
    AnimalObservation.id: AnimalObservation,
}
