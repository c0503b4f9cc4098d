from hr_payroll.api import create_app
from hr_payroll.config.settings import DEBUG
from hr_payroll.main import build_store, configure_logging

configure_logging()
app = create_app(build_store())

if __name__ == '__main__':
    app.run(debug=DEBUG, host='0.0.0.0', port=5000)
